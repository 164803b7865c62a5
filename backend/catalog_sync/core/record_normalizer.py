"""Record Normalizer - converts service records between flat and nested shapes.

Invariants:
    - to_canonical() resolves every detail field as: explicit flat > nested > default
    - detail_blob is ALWAYS regenerated from the resolved flat fields (input blobs ignored)
    - json.loads(record.detail_blob) == record.details() for every canonical record
    - to_legacy_flat() never raises: a malformed stored blob degrades to the flat fields
    - base_price is a Decimal in [0, MAX_PRICE]; missing, unparsable or out-of-range
      input becomes 0
    - A record without a usable name raises RecordValidationError (no identity, no sync)

Design Decisions:
    - Raw input classified into a tagged variant (FlatShape | NestedShape | MixedShape)
      before resolution, so shape handling is one isinstance dispatch instead of probing
    - Flat wins on conflict: explicit flat values are assumed newer than the cached blob
    - Field aliases accept snake_case, camelCase and the Portuguese wire keys used by the
      production API and the frontend snapshot (nome, preco_base, detalhes, ...)
    - Blob serialized with sort_keys: byte-stable across runs and stores
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from catalog_sync.core.domain_types import DETAIL_KEYS, ON_REQUEST, ServiceId
from catalog_sync.core.errors import ErrorContext, RecordValidationError
from catalog_sync.core.service_record import DETAIL_FIELD_MAP, ServiceRecord

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")

# Largest value a Numeric(10, 2) column holds
MAX_PRICE = Decimal("99999999.99")

# Canonical flat field -> accepted input keys, first match wins
_FLAT_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "nome"),
    "description": ("description", "descricao"),
    "base_price": ("base_price", "basePrice", "preco_base"),
    "capture_duration": (
        "capture_duration", "captureDuration", "duracao_media_captura",
    ),
    "treatment_duration": (
        "treatment_duration", "treatmentDuration", "duracao_media_tratamento",
    ),
    "deliverables": ("deliverables", "entregaveis"),
    "possible_add_ons": (
        "possible_add_ons", "possibleAddOns", "possiveis_adicionais",
    ),
    "travel_fee": ("travel_fee", "travelFee", "valor_deslocamento"),
}

_NESTED_CONTAINERS: tuple[str, ...] = ("details", "detalhes")

# Canonical nested key -> accepted keys inside the nested object
_NESTED_ALIASES: dict[str, tuple[str, ...]] = {
    "capture": ("capture", "captura"),
    "treatment": ("treatment", "tratamento"),
    "deliverables": ("deliverables", "entregaveis"),
    "addOns": ("addOns", "add_ons", "adicionais"),
    "travel": ("travel", "deslocamento"),
}

_DETAIL_DEFAULTS: dict[str, str] = {
    "capture": ON_REQUEST,
    "treatment": ON_REQUEST,
    "deliverables": "",
    "addOns": "",
    "travel": ON_REQUEST,
}


# ─── Raw Record Variants ─────────────────────────────────────────

@dataclass(frozen=True)
class RecordHeader:
    """Shape-independent part of a raw record."""
    name: str | None = None
    description: str | None = None
    base_price: Any = None
    id: Any = None


@dataclass(frozen=True)
class FlatShape:
    """Only flat detail fields present (or none at all)."""
    header: RecordHeader
    flat: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NestedShape:
    """Only a nested details object present."""
    header: RecordHeader
    details: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MixedShape:
    """Both flat fields and a nested details object present."""
    header: RecordHeader
    flat: dict[str, str] = field(default_factory=dict)
    details: dict[str, str] = field(default_factory=dict)


RawRecord = Union[FlatShape, NestedShape, MixedShape]


# ─── Classification ──────────────────────────────────────────────

def classify_raw(raw: Mapping[str, Any]) -> RawRecord:
    """Tag a raw mapping with its shape. Pure, never raises."""
    header = RecordHeader(
        name=_text_or_none(_pick(raw, "name")),
        description=_text_or_none(_pick(raw, "description")),
        base_price=_pick(raw, "base_price"),
        id=raw.get("id"),
    )
    flat = {}
    for field_name in DETAIL_FIELD_MAP.values():
        value = _text_or_none(_pick(raw, field_name))
        if value:
            flat[field_name] = value
    details = _extract_nested(raw)

    if flat and details:
        return MixedShape(header=header, flat=flat, details=details)
    if details:
        return NestedShape(header=header, details=details)
    return FlatShape(header=header, flat=flat)


def _pick(raw: Mapping[str, Any], field_name: str) -> Any:
    """First non-None value among the aliases of a canonical flat field."""
    for key in _FLAT_ALIASES[field_name]:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _extract_nested(raw: Mapping[str, Any]) -> dict[str, str]:
    """Read the nested details object (dict or JSON string), non-empty values only."""
    container: Any = None
    for key in _NESTED_CONTAINERS:
        if raw.get(key) is not None:
            container = raw[key]
            break
    if isinstance(container, str):
        container = parse_detail_blob(container)
    if not isinstance(container, Mapping):
        return {}

    details = {}
    for key, aliases in _NESTED_ALIASES.items():
        for alias in aliases:
            value = _text_or_none(container.get(alias))
            if value:
                details[key] = value
                break
    return details


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ─── Price Coercion ──────────────────────────────────────────────

def parse_price(value: Any) -> Decimal:
    """Lenient price coercion: missing, unparsable or out-of-range input becomes 0."""
    price = _to_decimal(value)
    if price is None or price < 0:
        return Decimal("0.00")
    if price > MAX_PRICE:
        logger.warning(f"base_price {value!r} exceeds {MAX_PRICE}, using 0")
        return Decimal("0.00")
    return price.quantize(_CENTS)


def validate_price(value: Any, context: ErrorContext | None = None) -> Decimal:
    """Strict price coercion for direct writes. Missing means 0; garbage raises."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0.00")
    price = _to_decimal(value)
    if price is None:
        raise RecordValidationError(
            f"base_price '{value}' is not a number", "base_price", context,
        )
    if price < 0:
        raise RecordValidationError(
            f"base_price must be >= 0, got {price}", "base_price", context,
        )
    if price > MAX_PRICE:
        raise RecordValidationError(
            f"base_price must be <= {MAX_PRICE}, got {value}", "base_price", context,
        )
    return price.quantize(_CENTS)


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace("R$", "").strip()
        # "1200,50" -> "1200.50"; "1.200,50" is not supported by the wire format
        if "," in value and "." not in value:
            value = value.replace(",", ".")
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite():
        return None
    return price


# ─── Detail Blob ─────────────────────────────────────────────────

def build_detail_blob(details: Mapping[str, str]) -> str:
    """Serialize the five detail fields. Stable: sorted keys, no ASCII escaping."""
    return json.dumps(
        {key: details[key] for key in DETAIL_KEYS},
        ensure_ascii=False, sort_keys=True,
    )


def parse_detail_blob(blob: Any) -> dict | None:
    """Deserialize a stored blob. Returns None for anything that is not a JSON object."""
    if isinstance(blob, Mapping):
        return dict(blob)
    if not isinstance(blob, str) or not blob.strip():
        return None
    try:
        parsed = json.loads(blob)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


# ─── Canonicalization ────────────────────────────────────────────

def to_canonical(raw: Mapping[str, Any] | RawRecord) -> ServiceRecord:
    """Normalize a raw record of any shape into a canonical ServiceRecord."""
    if isinstance(raw, (FlatShape, NestedShape, MixedShape)):
        variant = raw
    else:
        variant = classify_raw(raw)

    if isinstance(variant, MixedShape):
        resolved = _resolve_details(variant.flat, variant.details)
    elif isinstance(variant, NestedShape):
        resolved = _resolve_details({}, variant.details)
    else:
        resolved = _resolve_details(variant.flat, {})

    header = variant.header
    if not header.name:
        raise RecordValidationError(
            "Service name is required", "name",
            ErrorContext(operation="to_canonical"),
        )

    flat_fields = {
        DETAIL_FIELD_MAP[key]: value for key, value in resolved.items()
    }
    return ServiceRecord(
        name=header.name,
        description=header.description or "",
        base_price=parse_price(header.base_price),
        detail_blob=build_detail_blob(resolved),
        id=_coerce_id(header.id),
        **flat_fields,
    )


def _resolve_details(
    flat: Mapping[str, str], nested: Mapping[str, str],
) -> dict[str, str]:
    """Apply flat > nested > default per detail key."""
    resolved = {}
    for key, field_name in DETAIL_FIELD_MAP.items():
        resolved[key] = (
            flat.get(field_name) or nested.get(key) or _DETAIL_DEFAULTS[key]
        )
    return resolved


def _coerce_id(value: Any) -> ServiceId | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return ServiceId(int(value))
    except (TypeError, ValueError):
        return None


def to_legacy_flat(record: ServiceRecord) -> dict[str, Any]:
    """Flat fields plus the nested `details` object expected by older consumers.

    Never raises. A malformed or divergent stored blob is logged and replaced by
    the nested object rebuilt from the flat fields.
    """
    details = record.details()
    stored = parse_detail_blob(record.detail_blob)
    if stored is None:
        logger.warning(
            f"Malformed detail blob for '{record.name}', rebuilt from flat fields",
            extra={"record_name": record.name},
        )
    elif {key: stored.get(key) for key in DETAIL_KEYS} != details:
        logger.warning(
            f"Detail blob for '{record.name}' diverges from flat fields, flat wins",
            extra={"record_name": record.name},
        )

    return {
        "id": record.id,
        "name": record.name,
        "description": record.description,
        "base_price": record.base_price,
        "capture_duration": record.capture_duration,
        "treatment_duration": record.treatment_duration,
        "deliverables": record.deliverables,
        "possible_add_ons": record.possible_add_ons,
        "travel_fee": record.travel_fee,
        "detail_blob": build_detail_blob(details),
        "details": details,
    }


def merge_partial(
    existing: ServiceRecord, partial: Mapping[str, Any],
) -> ServiceRecord:
    """Apply a partial edit (either shape) on top of an existing record.

    Keys absent from `partial` keep their current value. Within `partial`,
    flat fields still win over its own nested object.
    """
    merged = to_legacy_flat(existing)
    merged.pop("details")
    merged.pop("detail_blob")

    variant = classify_raw(partial)
    header = variant.header
    if header.name is not None:
        merged["name"] = header.name
    if header.description is not None:
        merged["description"] = header.description
    if header.base_price is not None:
        merged["base_price"] = header.base_price

    nested = getattr(variant, "details", {})
    flat = getattr(variant, "flat", {})
    for key, value in nested.items():
        merged[DETAIL_FIELD_MAP[key]] = value
    merged.update(flat)
    return to_canonical(merged)
