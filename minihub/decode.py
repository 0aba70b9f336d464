"""Object decoding.

Turns raw ledger envelopes into typed records. Decoding fails closed: a missing
object, content of the wrong kind, a type tag naming another struct, or fields
that do not validate all yield ``None``. The reason is kept on ``Decoded.cause``
for logging and is never raised to readers.

Decoding is a pure transform, so decoding the same envelope twice yields equal
records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .models import ApplicationKey, DynamicFieldInfo, LedgerEvent, LedgerRecord, ObjectEnvelope
from .utils import struct_name

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LedgerRecord)
E = TypeVar("E", bound=BaseModel)

MOVE_OBJECT = "moveObject"

# Plain (non-object) dynamic fields come back wrapped in 0x2::dynamic_field::Field<K, V>.
_FIELD_WRAPPER = "::dynamic_field::Field<"


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Result of a decode attempt: a record, or the reason there is none."""

    record: Optional[T] = None
    cause: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def _describe_error(envelope: ObjectEnvelope) -> str:
    err = envelope.error or {}
    code = err.get("code") or "notExists"
    object_id = err.get("object_id") or err.get("objectId")
    return f"object not found ({code})" + (f": {object_id}" if object_id else "")


def _unwrap_field(type_tag: str, fields: Dict[str, Any]):
    """Return (type_tag, fields) of the value inside a dynamic_field::Field wrapper."""
    value = fields.get("value")
    if isinstance(value, dict) and isinstance(value.get("fields"), dict):
        return value.get("type", ""), value["fields"]
    return type_tag, fields


def try_decode(envelope: Optional[ObjectEnvelope], model: Type[T]) -> Decoded[T]:
    """Decode ``envelope`` into ``model``, keeping the failure cause."""
    if envelope is None or not envelope.exists:
        return Decoded(cause=_describe_error(envelope) if envelope else "no envelope")

    content = envelope.content
    if content is None:
        return Decoded(cause="object has no content")
    if content.data_type != MOVE_OBJECT:
        return Decoded(cause=f"unexpected content kind {content.data_type!r}")

    type_tag, fields = content.type, content.fields
    if _FIELD_WRAPPER in type_tag:
        type_tag, fields = _unwrap_field(type_tag, fields)

    if type_tag and model.move_struct and struct_name(type_tag) != model.move_struct:
        return Decoded(cause=f"expected {model.move_struct}, got {type_tag}")

    try:
        record = model.model_validate(fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        return Decoded(cause=f"malformed {model.__name__} field {loc}: {first.get('msg')}")
    return Decoded(record=record)


def decode(envelope: Optional[ObjectEnvelope], model: Type[T]) -> Optional[T]:
    """Decode ``envelope`` into ``model`` or return None."""
    result = try_decode(envelope, model)
    if result.cause:
        logger.debug("decode %s failed: %s", model.__name__, result.cause)
    return result.record


def decode_raw(raw: Union[Dict[str, Any], ObjectEnvelope, None], model: Type[T]) -> Decoded[T]:
    """Like ``try_decode`` but accepts the endpoint's raw JSON object response."""
    if raw is None or isinstance(raw, ObjectEnvelope):
        return try_decode(raw, model)
    try:
        envelope = ObjectEnvelope.model_validate(raw)
    except ValidationError as exc:
        return Decoded(cause=f"malformed envelope: {exc.error_count()} error(s)")
    return try_decode(envelope, model)


def decode_application_key(info: DynamicFieldInfo) -> Optional[ApplicationKey]:
    """Read the (candidate, index) key from an application's dynamic-field name."""
    value = info.name.value
    if not isinstance(value, dict):
        return None
    try:
        return ApplicationKey.model_validate(value)
    except ValidationError:
        return None


def decode_event(event: LedgerEvent, model: Type[E]) -> Optional[E]:
    """Decode an event's parsed JSON payload; None when it does not match."""
    try:
        return model.model_validate(event.parsed_json)
    except ValidationError as exc:
        logger.debug("event %s does not decode as %s: %s", event.type, model.__name__, exc.error_count())
        return None
