"""
Projected resource data model for cloud resource discovery.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List

from ontology import IsResource, Relationship, SerializationError, related, resource_map, resource_types


@dataclass
class ResourceInfo:
    """Canonical projection of one discovered ontology resource"""
    resource_type: str  # Most specific ontology type (e.g., "VirtualMachine")
    identifier: str     # Unique resource identifier
    types: List[str] = field(default_factory=list)      # Full type chain
    properties: Dict[str, Any] = None                   # Canonical property map
    relationships: List[Relationship] = field(default_factory=list)
    service: str = ""   # Service of the discoverer that found the resource
    region: str = ""    # Region the discoverer ran in
    error: str = ""     # Error message if projection failed

    def __post_init__(self):
        """Initialize properties"""
        if self.properties is None:
            self.properties = {}

    @classmethod
    def from_resource(cls, resource: IsResource, service: str = "", region: str = "") -> 'ResourceInfo':
        """Project a resource; a serialization failure is recorded in 'error'"""
        types = resource_types(resource)
        info = cls(
            resource_type=types[0] if types else type(resource).__name__,
            identifier=resource.get_id(),
            types=types,
            service=service,
            region=region
        )

        try:
            info.properties = resource_map(resource)
        except SerializationError as e:
            info.error = str(e)
            return info

        info.relationships = related(resource)
        return info

    def has_error(self) -> bool:
        """Check if resource projection encountered an error"""
        return bool(self.error)

    def is_valid(self) -> bool:
        """Check if resource has valid data"""
        return bool(self.identifier and not self.has_error())

    def to_dict(self) -> Dict[str, Any]:
        """Convert ResourceInfo to dictionary for serialization"""
        return {
            'resource_type': self.resource_type,
            'identifier': self.identifier,
            'types': self.types,
            'properties': self.properties,
            'related': [{'property': r.property, 'value': r.value} for r in self.relationships],
            'service': self.service,
            'region': self.region,
            'error': self.error
        }
