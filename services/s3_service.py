"""
S3 discoverer for cloud resource discovery.

Each bucket is translated into an ObjectStorage and the ObjectStorageService
that serves it over HTTPS.
"""

import json
from typing import Any, Dict, List, Type
from botocore.exceptions import BotoCoreError, ClientError

from core.base_discoverer import BaseDiscoverer, raw, labels_from_tags
from core.errors import DiscoveryError, format_client_error
from ontology import (
    IsResource, ObjectStorage, ObjectStorageService, GeoLocation, AtRestEncryption,
    ManagedKeyEncryption, CustomerKeyEncryption, HttpEndpoint, TransportEncryption
)
from .service_registry import register_discoverer

# Buckets without a location constraint live in us-east-1
DEFAULT_BUCKET_REGION = "us-east-1"

HTTPS_PORT = 443


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


@register_discoverer
class S3Discoverer(BaseDiscoverer):
    """S3 storage discovery implementation"""

    def get_service_name(self) -> str:
        return "s3"

    def get_discoverer_name(self) -> str:
        return "AWS Storage"

    def get_supported_resource_types(self) -> List[Type]:
        return [ObjectStorage, ObjectStorageService]

    def list_resources(self) -> List[IsResource]:
        """Discover all S3 buckets"""
        self.logger.info("🔍 Starting S3 resource discovery")

        try:
            response = self.get_client().list_buckets()
            self.stats['api_calls_made'] += 1
        except (BotoCoreError, ClientError) as e:
            self.logger.error(f"✗ Could not retrieve buckets: {format_client_error(e)}")
            raise DiscoveryError(f"could not list buckets: {format_client_error(e)}", self.get_service_name()) from e

        buckets = response.get('Buckets', [])
        self.logger.info(f"📋 Retrieved {len(buckets)} buckets")

        resources = self.translate(buckets, self.handle_bucket, 'Bucket')

        self.logger.info(f"🏁 S3 discovery complete: {len(resources)} total resources")
        return resources

    def handle_bucket(self, bucket: Dict[str, Any]) -> List[IsResource]:
        """Translate a bucket into its object storage and storage service"""
        bucket_name = bucket['Name']
        region = self._bucket_region(bucket_name)
        bucket_arn = f"arn:aws:s3:::{bucket_name}"
        endpoint = f"https://{bucket_name}.s3.{region}.amazonaws.com"

        service = ObjectStorageService(
            id=endpoint,
            name=bucket_name,
            creation_time=bucket.get('CreationDate'),
            parent_id=self.get_account_id(),
            raw=raw('s3.Bucket', bucket),
            geo_location=GeoLocation(region=region),
            storage_ids=[bucket_arn],
            http_endpoint=HttpEndpoint(
                url=endpoint,
                transport_encryption=TransportEncryption(
                    enabled=True,
                    enforced=self._transport_enforced(bucket_name),
                    protocol="TLS",
                    protocol_version=1.2,
                ),
            ),
            ports=[HTTPS_PORT],
        )

        storage = ObjectStorage(
            id=bucket_arn,
            name=bucket_name,
            creation_time=bucket.get('CreationDate'),
            labels=self._bucket_labels(bucket_name),
            parent_id=service.id,
            raw=raw('s3.Bucket', bucket),
            geo_location=GeoLocation(region=region),
            at_rest_encryption=self._bucket_encryption(bucket_name),
            public_access=not self._public_access_blocked(bucket_name),
        )

        return [storage, service]

    def _call(self, operation: str, bucket_name: str) -> Dict[str, Any]:
        response = getattr(self.get_client(), operation)(Bucket=bucket_name)
        self.stats['api_calls_made'] += 1
        return response

    def _bucket_region(self, bucket_name: str) -> str:
        try:
            location = self._call('get_bucket_location', bucket_name)
        except (BotoCoreError, ClientError) as e:
            self.logger.debug(f"Failed to get location for bucket {bucket_name}: {e}")
            return self.region or DEFAULT_BUCKET_REGION

        return location.get('LocationConstraint') or DEFAULT_BUCKET_REGION

    def _bucket_labels(self, bucket_name: str) -> Dict[str, str]:
        try:
            tagging = self._call('get_bucket_tagging', bucket_name)
        except (BotoCoreError, ClientError) as e:
            self.logger.debug(f"No tags for bucket {bucket_name}: {e}")
            return {}

        return labels_from_tags(tagging.get('TagSet'))

    def _bucket_encryption(self, bucket_name: str) -> AtRestEncryption:
        """Translate the default server side encryption of a bucket"""
        try:
            encryption = self._call('get_bucket_encryption', bucket_name)
        except (BotoCoreError, ClientError) as e:
            self.logger.debug(f"No encryption config for bucket {bucket_name}: {e}")
            return AtRestEncryption(managed_key_encryption=ManagedKeyEncryption(enabled=False))

        rules = encryption.get('ServerSideEncryptionConfiguration', {}).get('Rules', [])
        default = rules[0].get('ApplyServerSideEncryptionByDefault', {}) if rules else {}
        algorithm = default.get('SSEAlgorithm', '')

        if algorithm.startswith('aws:kms'):
            return AtRestEncryption(customer_key_encryption=CustomerKeyEncryption(
                algorithm=algorithm,
                enabled=True,
                key_url=default.get('KMSMasterKeyID', ''),
            ))

        return AtRestEncryption(managed_key_encryption=ManagedKeyEncryption(
            algorithm=algorithm,
            enabled=bool(algorithm),
        ))

    def _public_access_blocked(self, bucket_name: str) -> bool:
        """Check if all four public access block settings are enabled"""
        try:
            response = self._call('get_public_access_block', bucket_name)
        except (BotoCoreError, ClientError) as e:
            self.logger.debug(f"No public access block for bucket {bucket_name}: {e}")
            return False

        config = response.get('PublicAccessBlockConfiguration', {})
        return all(config.get(key, False) for key in (
            'BlockPublicAcls', 'IgnorePublicAcls', 'BlockPublicPolicy', 'RestrictPublicBuckets'
        ))

    def _transport_enforced(self, bucket_name: str) -> bool:
        """Check if the bucket policy denies requests without TLS"""
        try:
            response = self._call('get_bucket_policy', bucket_name)
        except ClientError as e:
            if _error_code(e) != 'NoSuchBucketPolicy':
                self.logger.debug(f"Failed to get policy for bucket {bucket_name}: {e}")
            return False
        except BotoCoreError as e:
            self.logger.debug(f"Failed to get policy for bucket {bucket_name}: {e}")
            return False

        try:
            policy = json.loads(response.get('Policy', '{}'))
        except ValueError:
            self.logger.warning(f"Failed to parse policy JSON for bucket {bucket_name}")
            return False

        statements = policy.get('Statement', [])
        if isinstance(statements, dict):
            statements = [statements]

        for statement in statements:
            if statement.get('Effect') != 'Deny':
                continue
            secure = statement.get('Condition', {}).get('Bool', {}).get('aws:SecureTransport')
            if str(secure).lower() == 'false':
                return True

        return False
