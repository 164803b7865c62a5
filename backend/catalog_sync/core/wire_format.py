"""Wire Format - canonical records encoded for the frontend snapshot and the pricing API.

Invariants:
    - Keys are the Portuguese wire keys (nome, preco_base, detalhes, ...)
    - preco_base is a JSON number; to_canonical(encoded) reproduces the record
    - duracao_media is derived, never stored: ceil(avg(capture, treatment)), fallback 3

Design Decisions:
    - Encoding lives in core (pure) so targets only do IO; decoding is to_canonical,
      which already accepts these keys
"""

import math
import re
from typing import Any

from catalog_sync.core.service_record import ServiceRecord

DEFAULT_AVERAGE_DURATION = 3

_NUMBER = re.compile(r"\d+")


def extract_duration(text: str | None) -> float:
    """Numeric duration in a free-text range: "1 a 2 horas" -> 1.5, "4 horas" -> 4."""
    if not text:
        return 0
    numbers = _NUMBER.findall(text)
    if not numbers:
        return 0
    if len(numbers) >= 2:
        return (int(numbers[0]) + int(numbers[1])) / 2
    return int(numbers[0])


def estimate_average_duration(record: ServiceRecord) -> int:
    total = extract_duration(record.capture_duration) + extract_duration(
        record.treatment_duration,
    )
    return math.ceil(total / 2) or DEFAULT_AVERAGE_DURATION


def _wire_details(record: ServiceRecord) -> dict[str, str]:
    return {
        "captura": record.capture_duration,
        "tratamento": record.treatment_duration,
        "entregaveis": record.deliverables,
        "adicionais": record.possible_add_ons,
        "deslocamento": record.travel_fee,
    }


def record_to_snapshot_entry(record: ServiceRecord) -> dict[str, Any]:
    """Frontend simulator shape: header, derived average duration, nested details."""
    return {
        "id": record.id,
        "nome": record.name,
        "descricao": record.description,
        "preco_base": float(record.base_price),
        "duracao_media": estimate_average_duration(record),
        "detalhes": _wire_details(record),
    }


def record_to_api_payload(record: ServiceRecord) -> dict[str, Any]:
    """Pricing API body: flat columns plus the nested object. No id (path param)."""
    return {
        "nome": record.name,
        "descricao": record.description,
        "preco_base": float(record.base_price),
        "duracao_media_captura": record.capture_duration,
        "duracao_media_tratamento": record.treatment_duration,
        "entregaveis": record.deliverables,
        "possiveis_adicionais": record.possible_add_ons,
        "valor_deslocamento": record.travel_fee,
        "detalhes": _wire_details(record),
    }
