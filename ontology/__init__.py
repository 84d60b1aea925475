"""
Ontology resource model for cloud security discovery.

Importing this package registers all resource variants in the schema registry.
"""

from .errors import OntologyError, SchemaError, SerializationError, NotOntologyResourceError
from .schema import (
    ROOT_TYPE, TYPE_KEY, FieldKind, FieldInfo, MessageSchema,
    message, resource_type, schema_of, get_registry, registered_resource_types, find_resource_type
)
from .encoding import marshal, format_timestamp, format_duration
from .introspect import (
    IsResource, HasRelatedResources, Relationship, RelationshipNaming, DEFAULT_NAMING,
    resource_types, has_type, related, resource_map, to_pretty_json, resource_ids, wrap_resource
)
from .resources import (
    GeoLocation, AutomaticUpdates, BootLogging, OSLogging, ActivityLogging, ResourceLogging,
    MalwareProtection, ManagedKeyEncryption, CustomerKeyEncryption, AtRestEncryption,
    TransportEncryption, HttpEndpoint, Backup, DocumentChecksum, SchemaValidation,
    VirtualMachine, BlockStorage, ObjectStorage, FileStorage, ObjectStorageService,
    NetworkInterface, VirtualNetwork, LoadBalancer, Account, ResourceGroup, SecurityAdvisoryDocument
)

__all__ = [
    'OntologyError',
    'SchemaError',
    'SerializationError',
    'NotOntologyResourceError',
    'ROOT_TYPE',
    'TYPE_KEY',
    'FieldKind',
    'FieldInfo',
    'MessageSchema',
    'message',
    'resource_type',
    'schema_of',
    'get_registry',
    'registered_resource_types',
    'find_resource_type',
    'marshal',
    'format_timestamp',
    'format_duration',
    'IsResource',
    'HasRelatedResources',
    'Relationship',
    'RelationshipNaming',
    'DEFAULT_NAMING',
    'resource_types',
    'has_type',
    'related',
    'resource_map',
    'to_pretty_json',
    'resource_ids',
    'wrap_resource',
    'GeoLocation',
    'AutomaticUpdates',
    'BootLogging',
    'OSLogging',
    'ActivityLogging',
    'ResourceLogging',
    'MalwareProtection',
    'ManagedKeyEncryption',
    'CustomerKeyEncryption',
    'AtRestEncryption',
    'TransportEncryption',
    'HttpEndpoint',
    'Backup',
    'DocumentChecksum',
    'SchemaValidation',
    'VirtualMachine',
    'BlockStorage',
    'ObjectStorage',
    'FileStorage',
    'ObjectStorageService',
    'NetworkInterface',
    'VirtualNetwork',
    'LoadBalancer',
    'Account',
    'ResourceGroup',
    'SecurityAdvisoryDocument',
]
