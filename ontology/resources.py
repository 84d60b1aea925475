"""
Ontology resource definitions.

Resource variants are flat dataclasses. The "is-a" hierarchy (Resource ->
CloudResource -> Compute -> VirtualMachine) is not expressed through class
inheritance but declared as a type chain with the ``resource_type`` decorator.

Field names follow the ontology naming conventions: references to other
resources end in ``_id`` (single) or ``_ids`` (collection).
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .schema import message, resource_type


class ResourceMixin:
    """Identifier accessors shared by all resource variants"""

    def get_id(self) -> str:
        return self.id or ""

    def get_name(self) -> str:
        return self.name or ""

    def get_creation_time(self) -> Optional[datetime]:
        return self.creation_time

    def get_raw(self) -> str:
        return self.raw or ""


# Auxiliary messages

@message
@dataclass
class GeoLocation:
    region: str = ""


@message
@dataclass
class AutomaticUpdates:
    enabled: bool = False
    interval: Optional[timedelta] = None
    security_only: bool = False


@message
@dataclass
class BootLogging:
    logging_service_ids: List[str] = field(default_factory=list)
    enabled: bool = False
    monitoring_log_data_enabled: bool = False
    retention_period: Optional[timedelta] = None
    security_alerts_enabled: bool = False


@message
@dataclass
class OSLogging:
    logging_service_ids: List[str] = field(default_factory=list)
    enabled: bool = False
    monitoring_log_data_enabled: bool = False
    retention_period: Optional[timedelta] = None
    security_alerts_enabled: bool = False


@message
@dataclass
class ActivityLogging:
    logging_service_ids: List[str] = field(default_factory=list)
    enabled: bool = False
    monitoring_log_data_enabled: bool = False
    retention_period: Optional[timedelta] = None
    security_alerts_enabled: bool = False


@message
@dataclass
class ResourceLogging:
    logging_service_ids: List[str] = field(default_factory=list)
    enabled: bool = False
    monitoring_log_data_enabled: bool = False
    retention_period: Optional[timedelta] = None
    security_alerts_enabled: bool = False


@message
@dataclass
class MalwareProtection:
    enabled: bool = False
    days_since_active: Optional[timedelta] = None
    number_of_threats_found: int = 0


@message
@dataclass
class ManagedKeyEncryption:
    algorithm: str = ""
    enabled: bool = False


@message
@dataclass
class CustomerKeyEncryption:
    algorithm: str = ""
    enabled: bool = False
    key_url: str = ""


@message
@dataclass
class AtRestEncryption:
    """Either managed (provider keys) or customer key encryption is set"""
    managed_key_encryption: Optional[ManagedKeyEncryption] = None
    customer_key_encryption: Optional[CustomerKeyEncryption] = None


@message
@dataclass
class TransportEncryption:
    enabled: bool = False
    enforced: bool = False
    protocol: str = ""
    protocol_version: float = 0.0


@message
@dataclass
class HttpEndpoint:
    url: str = ""
    transport_encryption: Optional[TransportEncryption] = None


@message
@dataclass
class Backup:
    enabled: bool = False
    retention_period: Optional[timedelta] = None
    storage_id: Optional[str] = None


@message
@dataclass
class DocumentChecksum:
    algorithm: str = ""
    errors: List[str] = field(default_factory=list)


@message
@dataclass
class SchemaValidation:
    format: str = ""
    schema_url: str = ""
    errors: List[str] = field(default_factory=list)


# Compute

@resource_type("VirtualMachine", "Compute", "CloudResource", "Resource")
@dataclass
class VirtualMachine(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    network_interface_ids: List[str] = field(default_factory=list)
    resource_logging: Optional[ResourceLogging] = None
    activity_logging: Optional[ActivityLogging] = None
    automatic_updates: Optional[AutomaticUpdates] = None
    block_storage_ids: List[str] = field(default_factory=list)
    boot_logging: Optional[BootLogging] = None
    malware_protection: Optional[MalwareProtection] = None
    os_logging: Optional[OSLogging] = None


# Storage

@resource_type("BlockStorage", "Storage", "CloudResource", "Resource")
@dataclass
class BlockStorage(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    at_rest_encryption: Optional[AtRestEncryption] = None
    backups: List[Backup] = field(default_factory=list)
    resource_logging: Optional[ResourceLogging] = None


@resource_type("ObjectStorage", "Storage", "CloudResource", "Resource")
@dataclass
class ObjectStorage(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    at_rest_encryption: Optional[AtRestEncryption] = None
    backups: List[Backup] = field(default_factory=list)
    public_access: bool = False
    resource_logging: Optional[ResourceLogging] = None


@resource_type("FileStorage", "Storage", "CloudResource", "Resource")
@dataclass
class FileStorage(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    at_rest_encryption: Optional[AtRestEncryption] = None
    backups: List[Backup] = field(default_factory=list)
    public_access: bool = False
    resource_logging: Optional[ResourceLogging] = None


# Networking

@resource_type("ObjectStorageService", "StorageService", "NetworkService", "Networking", "CloudResource", "Resource")
@dataclass
class ObjectStorageService(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    storage_ids: List[str] = field(default_factory=list)
    http_endpoint: Optional[HttpEndpoint] = None
    ips: List[str] = field(default_factory=list)
    ports: List[int] = field(default_factory=list)


@resource_type("NetworkInterface", "Networking", "CloudResource", "Resource")
@dataclass
class NetworkInterface(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    network_service_id: Optional[str] = None
    private_ips: List[str] = field(default_factory=list)
    public_ip: str = ""


@resource_type("VirtualNetwork", "Networking", "CloudResource", "Resource")
@dataclass
class VirtualNetwork(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    address_prefixes: List[str] = field(default_factory=list)


@resource_type("LoadBalancer", "NetworkService", "Networking", "CloudResource", "Resource")
@dataclass
class LoadBalancer(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None
    http_endpoints: List[HttpEndpoint] = field(default_factory=list)
    ips: List[str] = field(default_factory=list)
    network_interface_ids: List[str] = field(default_factory=list)
    ports: List[int] = field(default_factory=list)


# Infrastructure

@resource_type("Account", "Infrastructure", "Resource")
@dataclass
class Account(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None


@resource_type("ResourceGroup", "Infrastructure", "Resource")
@dataclass
class ResourceGroup(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    geo_location: Optional[GeoLocation] = None


# Documents

@resource_type("SecurityAdvisoryDocument", "Document", "Resource")
@dataclass
class SecurityAdvisoryDocument(ResourceMixin):
    id: str = ""
    name: str = ""
    description: str = ""
    creation_time: Optional[datetime] = None
    labels: Dict[str, str] = field(default_factory=dict)
    parent_id: Optional[str] = None
    raw: str = ""
    data_location_url: str = ""
    document_checksums: List[DocumentChecksum] = field(default_factory=list)
    schema_validation: Optional[SchemaValidation] = None
