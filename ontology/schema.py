"""
Schema registry for ontology messages.

Every ontology message is a dataclass that registers itself here when its
module is imported. The registry records the declared fields of a message in
declaration order and, for resource variants, the chain of type names the
variant belongs to (most specific first, ``Resource`` last).

The registry is filled during import and only read afterwards, so lookups need
no locking.
"""

import dataclasses
import logging
import typing
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from .errors import SchemaError

logger = logging.getLogger(__name__)

ROOT_TYPE = "Resource"

# Reserved key that carries the type chain in the canonical property map
TYPE_KEY = "type"


class FieldKind(Enum):
    """Value kind of a declared message field"""
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    TIMESTAMP = "timestamp"
    DURATION = "duration"
    MESSAGE = "message"
    MAP = "map"


_SCALAR_KINDS = {
    str: FieldKind.STRING,
    bool: FieldKind.BOOL,
    int: FieldKind.INT,
    float: FieldKind.FLOAT,
    datetime: FieldKind.TIMESTAMP,
    timedelta: FieldKind.DURATION,
}

_ZERO_VALUES = {
    FieldKind.STRING: "",
    FieldKind.BOOL: False,
    FieldKind.INT: 0,
    FieldKind.FLOAT: 0.0,
}


@dataclass(frozen=True)
class FieldInfo:
    """Metadata of a single declared message field"""
    name: str                # Python attribute name (e.g. "block_storage_ids")
    json_name: str           # JSON key (e.g. "blockStorageIds")
    kind: FieldKind
    repeated: bool = False
    optional: bool = False   # Explicit presence, None means "not set"
    message_type: Optional[type] = None

    def zero_value(self) -> Any:
        """Value emitted for this field when it is not populated"""
        if self.repeated:
            return []
        if self.kind is FieldKind.MAP:
            return {}
        if self.optional:
            return None
        return _ZERO_VALUES.get(self.kind)

    def is_populated(self, value: Any) -> bool:
        """Check whether a value differs from the field's unset state"""
        if value is None:
            return False
        if self.repeated or self.kind is FieldKind.MAP:
            return len(value) > 0
        if self.optional or self.kind not in _ZERO_VALUES:
            return True
        return value != _ZERO_VALUES[self.kind]


@dataclass(frozen=True)
class MessageSchema:
    """Declared fields and type chain of a message class"""
    message_type: type
    fields: Tuple[FieldInfo, ...]
    type_names: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.message_type.__name__

    def is_resource(self) -> bool:
        return bool(self.type_names)

    def get_field(self, name: str) -> Optional[FieldInfo]:
        for field in self.fields:
            if field.name == name:
                return field
        return None


_registry: Dict[type, MessageSchema] = {}


def json_name(field_name: str) -> str:
    """Convert a snake_case field name into its lowerCamelCase JSON name"""
    parts = field_name.split("_")
    return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def lower_camel(type_name: str) -> str:
    """Convert a type name (e.g. "VirtualMachine") into "virtualMachine" """
    return type_name[:1].lower() + type_name[1:]


def _field_info(name: str, hint: Any, owner: type) -> FieldInfo:
    optional = False
    repeated = False

    if typing.get_origin(hint) is Union:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) != 1:
            raise SchemaError(f"{owner.__name__}.{name}: unsupported union {hint}")
        hint = args[0]
        optional = True

    origin = typing.get_origin(hint)
    if origin is list:
        hint = typing.get_args(hint)[0]
        repeated = True
        optional = False
    elif origin is dict:
        return FieldInfo(name, json_name(name), FieldKind.MAP)

    if hint in _SCALAR_KINDS:
        kind = _SCALAR_KINDS[hint]
        # Timestamps and durations have no zero value other than "unset"
        if kind in (FieldKind.TIMESTAMP, FieldKind.DURATION) and not repeated:
            optional = True
        return FieldInfo(name, json_name(name), kind, repeated, optional)

    if dataclasses.is_dataclass(hint):
        if hint not in _registry:
            raise SchemaError(f"{owner.__name__}.{name}: message {hint.__name__} is not registered")
        return FieldInfo(name, json_name(name), FieldKind.MESSAGE, repeated, not repeated, hint)

    raise SchemaError(f"{owner.__name__}.{name}: unsupported field type {hint}")


def _register(cls: type, type_names: Tuple[str, ...]) -> type:
    if not dataclasses.is_dataclass(cls):
        raise SchemaError(f"{cls.__name__} must be a dataclass to be registered")

    hints = typing.get_type_hints(cls)
    fields = tuple(
        _field_info(f.name, hints[f.name], cls) for f in dataclasses.fields(cls)
    )

    if type_names and any(f.name == TYPE_KEY for f in fields):
        logger.warning(f"{cls.__name__} declares a '{TYPE_KEY}' field, it will be shadowed by the type chain")

    if cls in _registry:
        logger.warning(f"Message {cls.__name__} already registered, overwriting")

    _registry[cls] = MessageSchema(cls, fields, tuple(type_names))
    logger.debug(f"Registered message: {cls.__name__} ({len(fields)} fields)")
    return cls


def message(cls: type) -> type:
    """Class decorator that registers a plain (non-resource) ontology message"""
    return _register(cls, ())


def resource_type(*type_names: str):
    """
    Class decorator that registers a resource variant with its type chain.

    Args:
        type_names: Type names from the most specific (the variant itself) to
            the most general (``Resource``)
    """
    if not type_names or type_names[-1] != ROOT_TYPE:
        raise SchemaError(f"Type chain {list(type_names)} must end with '{ROOT_TYPE}'")

    def decorator(cls: type) -> type:
        if type_names[0] != cls.__name__:
            raise SchemaError(f"Type chain of {cls.__name__} must start with its own name, got '{type_names[0]}'")
        return _register(cls, type_names)

    return decorator


def schema_of(value: Any) -> Optional[MessageSchema]:
    """Get the schema of a message class or instance, None if unregistered"""
    cls = value if isinstance(value, type) else type(value)
    return _registry.get(cls)


def get_registry() -> Mapping[type, MessageSchema]:
    """Get a read-only view of all registered messages"""
    return MappingProxyType(_registry)


def registered_resource_types() -> List[Type]:
    """Get all registered resource variants (messages with a type chain)"""
    return [cls for cls, schema in _registry.items() if schema.is_resource()]


def find_resource_type(type_name: str) -> Optional[Type]:
    """Look up a resource variant by its own type name"""
    for cls in registered_resource_types():
        if cls.__name__ == type_name:
            return cls
    return None
