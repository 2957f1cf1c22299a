"""Known SAP response envelope shapes.

The product and stock services have changed their JSON envelope between
OData generations. Each known shape is one variant below with a pure
``parse`` that returns the variant or None; ``parse_envelope`` tries them
in a fixed priority order.

    FlatEnvelope          {"Product": ...}
    ListEnvelope          {"value": [{"Product": ...}, ...]}          (OData v4)
    LegacyListEnvelope    {"d": {"results": [{"Product": ...}, ...]}} (OData v2)
    LegacySingleEnvelope  {"d": {"Product": ...}}                     (OData v2)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

Record = Dict[str, Any]


def _records(items: Any) -> List[Record]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _head(items: Tuple[Any, ...]) -> List[Record]:
    # Only element 0 is ever the entity; a non-object there means no record.
    if items and isinstance(items[0], dict):
        return [items[0]]
    return []


@dataclass(frozen=True)
class FlatEnvelope:
    record: Record

    @classmethod
    def parse(cls, payload: Any, key: str) -> Optional["FlatEnvelope"]:
        if isinstance(payload, dict) and key in payload:
            return cls(payload)
        return None

    @property
    def records(self) -> List[Record]:
        return [self.record]


@dataclass(frozen=True)
class ListEnvelope:
    items: Tuple[Any, ...]

    @classmethod
    def parse(cls, payload: Any, key: str) -> Optional["ListEnvelope"]:
        if isinstance(payload, dict) and isinstance(payload.get("value"), list):
            return cls(tuple(payload["value"]))
        return None

    @property
    def records(self) -> List[Record]:
        return _head(self.items)


@dataclass(frozen=True)
class LegacyListEnvelope:
    items: Tuple[Any, ...]

    @classmethod
    def parse(cls, payload: Any, key: str) -> Optional["LegacyListEnvelope"]:
        if not isinstance(payload, dict):
            return None
        wrapper = payload.get("d")
        if isinstance(wrapper, dict) and isinstance(wrapper.get("results"), list):
            return cls(tuple(wrapper["results"]))
        return None

    @property
    def records(self) -> List[Record]:
        return _head(self.items)


@dataclass(frozen=True)
class LegacySingleEnvelope:
    record: Record

    @classmethod
    def parse(cls, payload: Any, key: str) -> Optional["LegacySingleEnvelope"]:
        if not isinstance(payload, dict):
            return None
        wrapper = payload.get("d")
        if isinstance(wrapper, dict) and key in wrapper:
            return cls(wrapper)
        return None

    @property
    def records(self) -> List[Record]:
        return [self.record]


Envelope = Union[FlatEnvelope, ListEnvelope, LegacyListEnvelope, LegacySingleEnvelope]

ENVELOPE_VARIANTS = (FlatEnvelope, ListEnvelope, LegacyListEnvelope, LegacySingleEnvelope)


def parse_envelope(payload: Any, key: str) -> Optional[Envelope]:
    """First envelope variant that matches ``payload``.

    ``key`` is the entity field that identifies a bare record, used by the
    flat and single-entity variants.
    """
    for variant in ENVELOPE_VARIANTS:
        envelope = variant.parse(payload, key)
        if envelope is not None:
            return envelope
    return None


def first_record(payload: Any, key: str, value_type: Optional[type] = None) -> Optional[Record]:
    """First entity record carrying ``key``, probing every known envelope.

    Only element 0 of a list envelope is considered. When ``value_type`` is
    given the field must also be of that type. A variant whose record does
    not qualify does not stop the search; the next variant is tried.
    """
    for variant in ENVELOPE_VARIANTS:
        envelope = variant.parse(payload, key)
        if envelope is None:
            continue
        for record in envelope.records:
            if key not in record:
                continue
            if value_type is not None and not isinstance(record[key], value_type):
                continue
            return record
    return None


def is_empty_result(payload: Any) -> bool:
    """True when the backend's own result list is present and empty."""
    if not isinstance(payload, dict):
        return False
    if payload.get("value") == []:
        return True
    wrapper = payload.get("d")
    return isinstance(wrapper, dict) and wrapper.get("results") == []


def expand_navigation(value: Any) -> List[Record]:
    """Expanded sub-entities as a list of records.

    Accepts a plain list, an OData v2 ``{"results": [...]}`` wrapper, or a
    single nested object.
    """
    if isinstance(value, list):
        return _records(value)
    if isinstance(value, dict):
        if isinstance(value.get("results"), list):
            return _records(value["results"])
        return [value]
    return []
