"""
JSON projection of ontology messages.

Messages are encoded field by field using the registered schema. Keys are the
lowerCamelCase JSON names of the fields, timestamps are RFC 3339 strings in UTC
and durations are decimal seconds with an ``s`` suffix (e.g. ``"172800s"``).
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Set

from .errors import SerializationError
from .schema import FieldInfo, FieldKind, schema_of


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 in UTC; naive values are taken as UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)

    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += _fraction(value.microsecond)

    return text + "Z"


def format_duration(value: timedelta) -> str:
    """Format a timedelta as seconds, e.g. 2 days -> "172800s" """
    micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if micros < 0 else ""
    seconds, micros = divmod(abs(micros), 1_000_000)

    text = f"{sign}{seconds}"
    if micros:
        text += _fraction(micros)

    return text + "s"


def _fraction(micros: int) -> str:
    if micros % 1000 == 0:
        return f".{micros // 1000:03d}"
    return f".{micros:06d}"


def encode_message(msg: Any, emit_unpopulated: bool = False,
                   _seen: Optional[Set[int]] = None) -> Dict[str, Any]:
    """
    Encode a registered message into a JSON-compatible dictionary.

    Args:
        msg: Instance of a registered ontology message
        emit_unpopulated: Emit every declared field, using zero values for
            unset ones, instead of omitting them

    Raises:
        TypeError: If a value does not match its declared field kind or the
            message is not registered
        ValueError: If the message contains a reference cycle
    """
    schema = schema_of(msg)
    if schema is None:
        raise TypeError(f"{type(msg).__name__} is not a registered ontology message")

    seen = _seen if _seen is not None else set()
    if id(msg) in seen:
        raise ValueError(f"cyclic reference to {schema.name} detected")
    seen.add(id(msg))

    out = {}
    for field in schema.fields:
        value = getattr(msg, field.name)

        if not field.is_populated(value):
            if emit_unpopulated:
                out[field.json_name] = field.zero_value()
            continue

        out[field.json_name] = _encode_field(field, value, emit_unpopulated, seen)

    seen.discard(id(msg))
    return out


def _encode_field(field: FieldInfo, value: Any, emit_unpopulated: bool, seen: Set[int]) -> Any:
    if field.repeated:
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"field '{field.name}' expects a list, got {type(value).__name__}")
        return [_encode_single(field, item, emit_unpopulated, seen) for item in value]

    if field.kind is FieldKind.MAP:
        if not isinstance(value, dict):
            raise TypeError(f"field '{field.name}' expects a dict, got {type(value).__name__}")
        return {_expect(field, key, str): _expect(field, item, str) for key, item in value.items()}

    return _encode_single(field, value, emit_unpopulated, seen)


def _encode_single(field: FieldInfo, value: Any, emit_unpopulated: bool, seen: Set[int]) -> Any:
    kind = field.kind

    if kind is FieldKind.STRING:
        return _expect(field, value, str)
    if kind is FieldKind.BOOL:
        return _expect(field, value, bool)
    if kind is FieldKind.INT:
        if isinstance(value, bool):
            raise TypeError(f"field '{field.name}' expects int, got bool")
        return _expect(field, value, int)
    if kind is FieldKind.FLOAT:
        if isinstance(value, bool):
            raise TypeError(f"field '{field.name}' expects float, got bool")
        return float(_expect(field, value, (int, float)))
    if kind is FieldKind.TIMESTAMP:
        return format_timestamp(_expect(field, value, datetime))
    if kind is FieldKind.DURATION:
        return format_duration(_expect(field, value, timedelta))
    if kind is FieldKind.MESSAGE:
        return encode_message(_expect(field, value, field.message_type), emit_unpopulated, seen)

    raise TypeError(f"field '{field.name}' has unsupported kind {kind}")


def _expect(field: FieldInfo, value: Any, expected) -> Any:
    if not isinstance(value, expected):
        raise TypeError(f"field '{field.name}' got unsupported value of type {type(value).__name__}")
    return value


def marshal(msg: Any, emit_unpopulated: bool = False, indent: Optional[int] = None) -> str:
    """
    Serialize a message into JSON text.

    Raises:
        SerializationError: If the message cannot be encoded
    """
    try:
        return json.dumps(encode_message(msg, emit_unpopulated), indent=indent, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"could not serialize {type(msg).__name__}: {e}") from e
