"""
Account discoverer for cloud resource discovery.
"""

from typing import List, Type
from botocore.exceptions import BotoCoreError, ClientError

from core.base_discoverer import BaseDiscoverer, raw
from core.errors import DiscoveryError, format_client_error
from ontology import IsResource, Account, GeoLocation
from .service_registry import register_discoverer


@register_discoverer
class IAMDiscoverer(BaseDiscoverer):
    """Discovers the AWS account the credentials belong to"""

    def get_service_name(self) -> str:
        return "iam"

    def get_discoverer_name(self) -> str:
        return "AWS Account"

    def get_supported_resource_types(self) -> List[Type]:
        return [Account]

    def list_resources(self) -> List[IsResource]:
        """Discover the current account"""
        try:
            identity = self.get_client('sts').get_caller_identity()
            self.stats['api_calls_made'] += 1
        except (BotoCoreError, ClientError) as e:
            raise DiscoveryError(f"could not get caller identity: {format_client_error(e)}",
                                 self.get_service_name()) from e

        account_id = identity['Account']
        self._account_id = account_id
        identity.pop('ResponseMetadata', None)

        account = Account(
            id=account_id,
            name=self._account_alias() or account_id,
            raw=raw('sts.CallerIdentity', identity),
            # IAM is a global service
            geo_location=GeoLocation(region="global"),
        )

        self.stats['resources_found'] += 1
        self.logger.info(f"🏢 AWS Account ID: {account_id}")
        return [account]

    def _account_alias(self) -> str:
        try:
            response = self.get_client().list_account_aliases()
            self.stats['api_calls_made'] += 1
        except (BotoCoreError, ClientError) as e:
            self.logger.debug(f"Failed to list account aliases: {e}")
            return ""

        aliases = response.get('AccountAliases', [])
        return aliases[0] if aliases else ""
