"""
Base discoverer class for cloud resource discovery implementations.

A discoverer lists the resources of one cloud service and translates them into
ontology resources.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional, Type
import json
import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ontology import IsResource
from .config import DiscoveryConfig
from .errors import DiscoveryError, format_client_error


def raw(kind: str, *payloads: Any) -> str:
    """Snapshot untranslated provider payloads as JSON, grouped by kind"""
    return json.dumps({kind: list(payloads)}, default=str, sort_keys=True)


def labels_from_tags(tags: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    """Convert an AWS tag list into a label dictionary"""
    return {tag['Key']: tag.get('Value', '') for tag in tags or [] if 'Key' in tag}


def name_from_tags(tags: Optional[List[Dict[str, str]]], fallback: str) -> str:
    """Return the value of the 'Name' tag, or the fallback if there is none"""
    return labels_from_tags(tags).get('Name') or fallback


class BaseDiscoverer(ABC):
    """Abstract base class for cloud service discoverers"""

    def __init__(self, config: DiscoveryConfig, session: boto3.Session):
        """Initialize discoverer with configuration and AWS session"""
        self.config = config
        self.session = session
        self.region = config.region or session.region_name or ""
        self.logger = logging.getLogger(f'cloud_discovery.{self.get_service_name()}')

        # Service-specific client cache
        self._clients = {}
        self._account_id = None

        # Discoverer statistics
        self.stats = {
            'resources_found': 0,
            'resources_with_errors': 0,
            'api_calls_made': 0
        }

    @abstractmethod
    def get_service_name(self) -> str:
        """Return the AWS service name (e.g., 'ec2', 's3')"""
        pass

    @abstractmethod
    def get_discoverer_name(self) -> str:
        """Return a human readable name (e.g., 'AWS Compute')"""
        pass

    @abstractmethod
    def get_supported_resource_types(self) -> List[Type]:
        """Return the ontology resource classes this discoverer produces"""
        pass

    @abstractmethod
    def list_resources(self) -> List[IsResource]:
        """Discover all resources of this service as ontology resources"""
        pass

    def get_client(self, service_name: str = None):
        """Get cached AWS client for service"""
        if service_name is None:
            service_name = self.get_service_name()

        if service_name not in self._clients:
            try:
                self._clients[service_name] = self.session.client(
                    service_name,
                    region_name=self.region or None
                )
            except (BotoCoreError, ClientError) as e:
                self.logger.error(f"Failed to create {service_name} client: {e}")
                raise DiscoveryError(f"could not create {service_name} client: {e}", self.get_service_name()) from e

        return self._clients[service_name]

    def get_account_id(self) -> str:
        """Get the AWS account ID of the current credentials, needed for ARNs"""
        if self._account_id:
            return self._account_id

        try:
            response = self.get_client('sts').get_caller_identity()
            self.stats['api_calls_made'] += 1
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"Failed to get account ID: {e}")
            raise DiscoveryError(f"could not get account ID: {format_client_error(e)}",
                                 self.get_service_name()) from e

        self._account_id = response['Account']
        return self._account_id

    def paginate(self, operation: str, result_key: str, service_name: str = None, **kwargs) -> Iterator[Dict[str, Any]]:
        """
        Iterate over all items of a paginated AWS API operation.

        Args:
            operation: Client operation name (e.g. 'describe_volumes')
            result_key: Key of the item list in each page
            service_name: Client to use, defaults to this discoverer's service

        Raises:
            DiscoveryError: If the API call fails
        """
        client = self.get_client(service_name)

        try:
            paginator = client.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                self.stats['api_calls_made'] += 1
                for item in page.get(result_key, []):
                    yield item
        except (BotoCoreError, ClientError) as e:
            self.logger.warning(f"✗ {operation}: {format_client_error(e)}")
            raise DiscoveryError(f"could not call {operation}: {format_client_error(e)}",
                                 self.get_service_name()) from e

    def translate(self, items: List[Dict[str, Any]], handler: Callable[[Dict[str, Any]], Any],
                  kind: str) -> List[IsResource]:
        """
        Translate provider items into ontology resources one by one.

        The handler returns a resource or a list of resources per item. An item
        that fails to translate is logged and skipped; it does not affect the
        other items.
        """
        resources = []

        for item in items:
            try:
                result = handler(item)
                if isinstance(result, list):
                    resources.extend(result)
                else:
                    resources.append(result)
            except Exception as e:
                self.stats['resources_with_errors'] += 1
                self.logger.warning(f"✗ Could not translate {kind}: {e}")

        self.stats['resources_found'] += len(resources)

        if resources:
            self.logger.info(f"✓ {kind}: Found {len(resources)} resources")
        else:
            self.logger.debug(f"○ {kind}: No resources found")

        return resources

    def arn(self, service: str, resource: str, region: Optional[str] = None) -> str:
        """Build an ARN for a resource of this account"""
        region = self.region if region is None else region
        return f"arn:aws:{service}:{region}:{self.get_account_id()}:{resource}"

    def log_statistics(self):
        """Log discoverer statistics"""
        stats = self.stats

        self.logger.info(f"📊 {self.get_discoverer_name()} Discovery Statistics:")
        self.logger.info(f"   Resources Found: {stats['resources_found']}")
        self.logger.info(f"   API Calls: {stats['api_calls_made']}")

        if stats['resources_with_errors'] > 0:
            self.logger.warning(f"   Resources with Errors: {stats['resources_with_errors']}")
