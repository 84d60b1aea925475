"""
Type, relationship and property introspection for ontology resources.

All functions here are pure: they read the registered schema and the current
field values of a resource and never modify either.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .encoding import encode_message, marshal
from .errors import NotOntologyResourceError, SerializationError
from .schema import TYPE_KEY, FieldKind, lower_camel, schema_of

# Property used for relationships supplied by HasRelatedResources
CURATED_PROPERTY = "related"


@runtime_checkable
class IsResource(Protocol):
    """Accessors every ontology resource provides"""

    def get_id(self) -> str: ...

    def get_name(self) -> str: ...

    def get_creation_time(self) -> Optional[datetime]: ...

    def get_raw(self) -> str: ...


@runtime_checkable
class HasRelatedResources(Protocol):
    """Resources that supply their own list of related resource IDs"""

    def related(self) -> List[str]: ...


@dataclass(frozen=True)
class Relationship:
    """Reference from a resource property to another resource's ID"""
    property: str
    value: str


@dataclass(frozen=True)
class RelationshipNaming:
    """
    Naming convention that marks a field as a reference to other resources.

    A field qualifies if its name ends with ``suffix`` (single reference) or
    ``collection_suffix`` (list of references); the property name is the field
    name without the suffix.
    """
    suffix: str = "_id"
    collection_suffix: str = "_ids"

    def property_for(self, field_name: str) -> Optional[str]:
        if self.suffix and field_name.endswith(self.suffix):
            return field_name[:-len(self.suffix)]
        if self.collection_suffix and field_name.endswith(self.collection_suffix):
            return field_name[:-len(self.collection_suffix)]
        return None


DEFAULT_NAMING = RelationshipNaming()


def resource_types(resource: Any) -> List[str]:
    """
    Get the type chain of a resource, most specific type first.

    Accepts a resource instance or a resource class. Returns an empty list for
    messages that declare no type chain.
    """
    schema = schema_of(resource)
    if schema is None:
        return []
    return list(schema.type_names)


def has_type(resource: Any, type_name: str) -> bool:
    """Check if type_name is part of the resource's type chain (exact match)"""
    return type_name in resource_types(resource)


def related(resource: IsResource, naming: RelationshipNaming = DEFAULT_NAMING) -> List[Relationship]:
    """
    Extract relationships to other resources.

    Resources implementing HasRelatedResources provide their own list, which
    takes precedence. Otherwise every string field matching the naming
    convention is inspected in declaration order: a non-empty single value
    yields one relationship, a list yields one relationship per element.
    """
    if isinstance(resource, HasRelatedResources):
        return [Relationship(CURATED_PROPERTY, value) for value in resource.related() if value]

    schema = schema_of(resource)
    if schema is None:
        return []

    relationships = []
    for field in schema.fields:
        # Only string fields can hold resource IDs
        if field.kind is not FieldKind.STRING:
            continue

        prop = naming.property_for(field.name)
        if prop is None:
            continue

        value = getattr(resource, field.name, None)
        if field.repeated:
            if not isinstance(value, (list, tuple)):
                continue
            # List elements are taken as-is, including empty strings
            for item in value:
                if isinstance(item, str):
                    relationships.append(Relationship(prop, item))
        elif isinstance(value, str) and value:
            relationships.append(Relationship(prop, value))

    return relationships


def resource_map(resource: IsResource) -> Dict[str, Any]:
    """
    Get the properties of a resource as a dictionary based on its JSON form.

    Every declared field is included, unset ones with their zero value. The
    type chain is added under the special key "type".

    Raises:
        SerializationError: If the resource cannot be serialized
    """
    text = marshal(resource, emit_unpopulated=True)

    try:
        props = json.loads(text)
    except ValueError as e:
        raise SerializationError(f"could not parse serialized {type(resource).__name__}: {e}") from e

    props[TYPE_KEY] = resource_types(resource)
    return props


def to_pretty_json(resource: IsResource) -> str:
    """Render the resource map as indented JSON"""
    return json.dumps(resource_map(resource), indent=2, ensure_ascii=False)


def resource_ids(resources: Iterable[IsResource]) -> List[str]:
    """Get the IDs of the given resources, in order"""
    return [r.get_id() for r in resources]


def wrap_resource(resource: Optional[IsResource]) -> Optional[Dict[str, Any]]:
    """
    Wrap a resource into the nested form of the resource hierarchy.

    The plain JSON form of the resource (unset fields omitted) is nested under
    the lowerCamelCase names of its type chain, below the root, e.g.
    {"cloudResource": {"compute": {"virtualMachine": {...}}}}.

    Raises:
        NotOntologyResourceError: If the value is not a registered resource
        SerializationError: If the resource cannot be serialized
    """
    if resource is None:
        return None

    types = resource_types(resource)
    if not types:
        raise NotOntologyResourceError(resource)

    try:
        body = encode_message(resource)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"could not serialize {type(resource).__name__}: {e}") from e

    # The root type is the envelope itself and gets no key of its own
    for type_name in types[:-1]:
        body = {lower_camel(type_name): body}

    return body
