"""
EC2 discoverer for cloud resource discovery.

Translates instances, volumes, network interfaces and VPCs into ontology
resources. All IDs are ARNs, so references between the resources (e.g. the
volumes attached to an instance) resolve to the IDs of discovered resources.
"""

from typing import Any, Dict, List, Optional, Type
from botocore.exceptions import BotoCoreError, ClientError

from core.base_discoverer import BaseDiscoverer, raw, labels_from_tags, name_from_tags
from ontology import (
    IsResource, VirtualMachine, BlockStorage, NetworkInterface, VirtualNetwork,
    GeoLocation, AtRestEncryption, ManagedKeyEncryption, CustomerKeyEncryption,
    BootLogging, OSLogging, ActivityLogging, ResourceLogging, AutomaticUpdates, MalwareProtection
)
from .service_registry import register_discoverer

# Algorithm used by EBS for encrypted volumes
EBS_ENCRYPTION_ALGORITHM = "AES256"


@register_discoverer
class EC2Discoverer(BaseDiscoverer):
    """EC2 compute and networking discovery implementation"""

    def __init__(self, config, session):
        super().__init__(config, session)
        self._key_managers: Dict[str, Optional[str]] = {}

    def get_service_name(self) -> str:
        return "ec2"

    def get_discoverer_name(self) -> str:
        return "AWS Compute"

    def get_supported_resource_types(self) -> List[Type]:
        return [VirtualMachine, BlockStorage, NetworkInterface, VirtualNetwork]

    def list_resources(self) -> List[IsResource]:
        """Discover all EC2 resources"""
        self.logger.info(f"🔍 Starting EC2 resource discovery in {self.region}")

        instances = [
            instance
            for reservation in self.paginate('describe_instances', 'Reservations')
            for instance in reservation.get('Instances', [])
        ]
        volumes = list(self.paginate('describe_volumes', 'Volumes'))
        interfaces = list(self.paginate('describe_network_interfaces', 'NetworkInterfaces'))
        vpcs = list(self.paginate('describe_vpcs', 'Vpcs'))

        resources = []
        resources.extend(self.translate(instances, self.handle_instance, 'VirtualMachine'))
        resources.extend(self.translate(volumes, self.handle_volume, 'BlockStorage'))
        resources.extend(self.translate(interfaces, self.handle_network_interface, 'NetworkInterface'))
        resources.extend(self.translate(vpcs, self.handle_vpc, 'VirtualNetwork'))

        self.logger.info(f"🏁 EC2 discovery complete: {len(resources)} total resources")
        return resources

    def handle_instance(self, instance: Dict[str, Any]) -> VirtualMachine:
        """Translate an EC2 instance into a virtual machine"""
        instance_id = instance['InstanceId']
        tags = instance.get('Tags')
        monitoring = (instance.get('Monitoring') or {}).get('State') == 'enabled'

        return VirtualMachine(
            id=self.arn('ec2', f"instance/{instance_id}"),
            name=name_from_tags(tags, instance_id),
            creation_time=instance.get('LaunchTime'),
            labels=labels_from_tags(tags),
            parent_id=self._vpc_arn(instance.get('VpcId')),
            raw=raw('ec2.Instance', instance),
            geo_location=GeoLocation(region=self.region),
            network_interface_ids=[
                self.arn('ec2', f"network-interface/{ni['NetworkInterfaceId']}")
                for ni in instance.get('NetworkInterfaces', [])
            ],
            block_storage_ids=[
                self.arn('ec2', f"volume/{mapping['Ebs']['VolumeId']}")
                for mapping in instance.get('BlockDeviceMappings', [])
                if 'Ebs' in mapping
            ],
            resource_logging=ResourceLogging(monitoring_log_data_enabled=monitoring),
            # The EC2 API does not expose boot or OS log configuration
            boot_logging=BootLogging(),
            os_logging=OSLogging(),
            activity_logging=ActivityLogging(),
            automatic_updates=AutomaticUpdates(),
            malware_protection=MalwareProtection(),
        )

    def handle_volume(self, volume: Dict[str, Any]) -> BlockStorage:
        """Translate an EBS volume into block storage"""
        volume_id = volume['VolumeId']
        tags = volume.get('Tags')

        return BlockStorage(
            id=self.arn('ec2', f"volume/{volume_id}"),
            name=name_from_tags(tags, volume_id),
            creation_time=volume.get('CreateTime'),
            labels=labels_from_tags(tags),
            raw=raw('ec2.Volume', volume),
            geo_location=GeoLocation(region=self.region),
            at_rest_encryption=self._volume_encryption(volume),
        )

    def handle_network_interface(self, interface: Dict[str, Any]) -> NetworkInterface:
        """Translate an elastic network interface"""
        interface_id = interface['NetworkInterfaceId']
        tags = interface.get('TagSet')

        return NetworkInterface(
            id=self.arn('ec2', f"network-interface/{interface_id}"),
            name=name_from_tags(tags, interface_id),
            description=interface.get('Description', ''),
            labels=labels_from_tags(tags),
            parent_id=self._vpc_arn(interface.get('VpcId')),
            raw=raw('ec2.NetworkInterface', interface),
            geo_location=GeoLocation(region=self.region),
            private_ips=[
                address['PrivateIpAddress']
                for address in interface.get('PrivateIpAddresses', [])
                if address.get('PrivateIpAddress')
            ],
            public_ip=(interface.get('Association') or {}).get('PublicIp', ''),
        )

    def handle_vpc(self, vpc: Dict[str, Any]) -> VirtualNetwork:
        """Translate a VPC into a virtual network"""
        vpc_id = vpc['VpcId']
        tags = vpc.get('Tags')

        prefixes = [
            association['CidrBlock']
            for association in vpc.get('CidrBlockAssociationSet', [])
            if association.get('CidrBlock')
        ]
        if not prefixes and vpc.get('CidrBlock'):
            prefixes = [vpc['CidrBlock']]

        return VirtualNetwork(
            id=self._vpc_arn(vpc_id),
            name=name_from_tags(tags, vpc_id),
            labels=labels_from_tags(tags),
            parent_id=vpc.get('OwnerId') or self.get_account_id(),
            raw=raw('ec2.Vpc', vpc),
            geo_location=GeoLocation(region=self.region),
            address_prefixes=prefixes,
        )

    def _vpc_arn(self, vpc_id: Optional[str]) -> Optional[str]:
        if not vpc_id:
            return None
        return self.arn('ec2', f"vpc/{vpc_id}")

    def _volume_encryption(self, volume: Dict[str, Any]) -> AtRestEncryption:
        """Determine the at-rest encryption of a volume"""
        if not volume.get('Encrypted'):
            return AtRestEncryption(managed_key_encryption=ManagedKeyEncryption(enabled=False))

        key_id = volume.get('KmsKeyId', '')
        if key_id and self._key_manager(key_id) == 'CUSTOMER':
            return AtRestEncryption(customer_key_encryption=CustomerKeyEncryption(
                algorithm=EBS_ENCRYPTION_ALGORITHM,
                enabled=True,
                key_url=key_id,
            ))

        return AtRestEncryption(managed_key_encryption=ManagedKeyEncryption(
            algorithm=EBS_ENCRYPTION_ALGORITHM,
            enabled=True,
        ))

    def _key_manager(self, key_id: str) -> Optional[str]:
        """Look up whether a KMS key is AWS or customer managed"""
        if key_id not in self._key_managers:
            try:
                response = self.get_client('kms').describe_key(KeyId=key_id)
                self.stats['api_calls_made'] += 1
                self._key_managers[key_id] = response['KeyMetadata'].get('KeyManager')
            except (BotoCoreError, ClientError) as e:
                self.logger.debug(f"Failed to describe KMS key {key_id}: {e}")
                self._key_managers[key_id] = None

        return self._key_managers[key_id]
