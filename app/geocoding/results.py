"""Typed geocoder results.

Every provider call ends in exactly one of three variants:

``GeocodeMatch``
    The provider returned at least one candidate; fields describe the
    best (first) one plus the candidate count.
``NotFound``
    A well-formed response with zero candidates.
``ProviderError``
    Transport failure, non-2xx status or an undecodable body.  ``message``
    is an opaque diagnostic string surfaced in row notes.

Instances are frozen; the pipeline only reads them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

MatchLevel = Literal["house", "street", "locality", "unknown"]


@dataclass(frozen=True)
class GeocodeMatch:
    match_level: MatchLevel
    reverse_ok: bool
    candidates: int
    lat: float | None = None
    lon: float | None = None
    postal_code: str | None = None
    confidence: float | None = None


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class ProviderError:
    message: str


ProviderResult = Union[GeocodeMatch, NotFound, ProviderError]


def parse_coordinate(value: object) -> float | None:
    """Return *value* as a float, or ``None`` when missing or not numeric."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
