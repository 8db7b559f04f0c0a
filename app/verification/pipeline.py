"""Address verification pipeline.

Per row, strictly in order::

    CLEAN -> DETECT -> NORMALIZE -> PRIMARY_LOOKUP -> (US_STRUCTURED_RETRY)?
          -> SCORE -> (SECONDARY_LOOKUP)? -> FINALIZE

Rows run sequentially.  The only state shared between rows is the batch's
:class:`~app.geocoding.pacing.Pacer`, which spaces every primary-provider
call (free-form, unit-stripped retry and structured retry alike) by the
configured minimum interval.

A failure on one row never affects another: provider failures arrive as
typed results, and anything unexpected is logged and turned into an
``error`` row.

Safety rule: raw address text is never logged.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from app.core.settings import get_settings
from app.geocoding.nominatim import NominatimClient
from app.geocoding.opencage import OpenCageClient
from app.geocoding.pacing import Pacer
from app.geocoding.results import GeocodeMatch, NotFound, ProviderError, ProviderResult
from app.normalization.address_normalizer import USAddressParts, normalize_address, parse_us_address
from app.normalization.country_detector import detect_country
from app.normalization.postal import find_postal
from app.normalization.text_cleaner import clean_address, strip_unit_tokens
from app.verification.models import AddressRecord, VerificationResult
from app.verification.scoring import VALID_THRESHOLD, compute_score, pick_best, status_for_score

logger = logging.getLogger(__name__)


class _RowContext:
    """Values derived for one row before any provider is called."""

    __slots__ = ("record", "input_address", "cleaned", "country", "normalized", "input_postal", "notes")

    def __init__(self, record: AddressRecord, default_country: str | None) -> None:
        self.record = record
        self.input_address = record.full_text()
        self.cleaned = clean_address(self.input_address)
        self.country = detect_country(self.cleaned, explicit=record.country, default=default_country)
        self.normalized = normalize_address(self.cleaned, self.country)
        self.input_postal = (record.zip or "").strip() or find_postal(self.normalized, self.country)
        self.notes: list[str] = []

    def result(self, **fields) -> VerificationResult:
        return VerificationResult(
            input_address=self.input_address,
            cleaned_address=self.cleaned,
            normalized_address=self.normalized,
            country=self.country,
            notes="; ".join(self.notes) or None,
            **fields,
        )


class VerificationPipeline:
    """Verify batches of address records against the two geocoders.

    Parameters
    ----------
    primary:
        Primary (paced) geocoder.
    secondary:
        Optional fallback geocoder.  ``None`` disables the secondary stage.
    interval_s:
        Minimum seconds between primary-provider calls.
    default_country:
        Country used when detection finds nothing and the batch supplies
        no default of its own.
    clock, sleep:
        Injected into each batch's :class:`Pacer`.
    """

    def __init__(
        self,
        primary: NominatimClient,
        secondary: OpenCageClient | None = None,
        *,
        interval_s: float = 1.2,
        default_country: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.primary = primary
        self.secondary = secondary
        self.interval_s = interval_s
        self.default_country = default_country
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls) -> "VerificationPipeline":
        settings = get_settings()
        return cls(
            NominatimClient(),
            OpenCageClient.from_settings(),
            interval_s=settings.nominatim_interval_ms / 1000.0,
            default_country=settings.default_country,
        )

    def new_pacer(self) -> Pacer:
        return Pacer(self.interval_s, clock=self._clock, sleep=self._sleep)

    # -- public API ---------------------------------------------------------

    def verify_batch(
        self,
        records: Iterable[AddressRecord],
        default_country: str | None = None,
        *,
        debug: bool = False,
    ) -> list[VerificationResult]:
        """Verify *records* in order; return one result per record, index-aligned."""
        pacer = self.new_pacer()
        default = default_country or self.default_country
        results: list[VerificationResult] = []

        for index, record in enumerate(records):
            try:
                result = self.verify_record(record, pacer=pacer, default_country=default)
            except Exception as exc:
                logger.exception("verify_batch: row %d failed", index)
                result = self._failed_row(record, exc)
            logger.log(
                logging.INFO if debug else logging.DEBUG,
                "row %d: country=%s provider=%s status=%s score=%d notes=%s",
                index,
                result.country or "-",
                result.provider,
                result.status,
                result.score,
                result.notes or "",
            )
            results.append(result)

        logger.info("verify_batch: %d rows, %d primary calls", len(results), pacer.calls)
        return results

    def verify_record(
        self,
        record: AddressRecord,
        *,
        pacer: Pacer | None = None,
        default_country: str | None = None,
    ) -> VerificationResult:
        """Run the full state machine for one record."""
        if pacer is None:
            pacer = self.new_pacer()
        row = _RowContext(record, default_country)

        if not row.normalized:
            row.notes.append("empty_address")
            return row.result(status="error", score=0, provider="primary")

        primary = self._primary_lookup(row, pacer)
        result = self._score_primary(row, primary)

        if self.secondary is not None and result.score < VALID_THRESHOLD:
            result = self._secondary_lookup(row, result)

        return result

    # -- stages -------------------------------------------------------------

    def _primary_lookup(self, row: _RowContext, pacer: Pacer) -> ProviderResult:
        country = row.country or None
        result = self.primary.search_free(row.normalized, country=country, pacer=pacer)

        if not isinstance(result, GeocodeMatch):
            stripped = strip_unit_tokens(row.normalized)
            if stripped and stripped != row.normalized:
                row.notes.append("unit_retry=1")
                result = self.primary.search_free(stripped, country=country, pacer=pacer)

        needs_structured = not isinstance(result, GeocodeMatch) or result.match_level == "unknown"
        if row.country == "US" and needs_structured:
            parts = self._structured_parts(row)
            if parts is not None:
                structured = self.primary.search_structured(parts, country="US", pacer=pacer)
                if isinstance(structured, GeocodeMatch):
                    row.notes.append("us_structured=1")
                    result = structured

        return result

    def _structured_parts(self, row: _RowContext) -> USAddressParts | None:
        record = row.record
        if record.has_structured_fields:
            return USAddressParts(
                street=strip_unit_tokens(record.street.strip()),
                city=record.city.strip(),
                state=record.province.strip(),
                postalcode=(record.zip or "").strip(),
            )
        return parse_us_address(row.normalized)

    def _score_primary(self, row: _RowContext, primary: ProviderResult) -> VerificationResult:
        if isinstance(primary, GeocodeMatch):
            row.notes.insert(0, f"primary_candidates={primary.candidates}")
            score = compute_score(
                primary.match_level,
                primary.reverse_ok,
                primary.candidates,
                primary.postal_code,
                row.country,
                row.input_postal,
            )
            return row.result(
                status=status_for_score(score),
                score=score,
                lat=primary.lat,
                lon=primary.lon,
                provider="primary",
                match_level=primary.match_level,
                postal_code=primary.postal_code,
            )

        if isinstance(primary, ProviderError):
            row.notes.append(primary.message)
        else:
            row.notes.append("primary_not_found")
        return row.result(status="error", score=0, provider="primary")

    def _secondary_lookup(self, row: _RowContext, held: VerificationResult) -> VerificationResult:
        try:
            secondary = self.secondary.geocode(row.normalized, country=row.country or None)
        except Exception as exc:
            logger.exception("secondary geocoder raised")
            secondary = ProviderError(f"{type(exc).__name__}: {exc}")

        if isinstance(secondary, ProviderError):
            row.notes.append(f"secondary_error={secondary.message}")
            return held.model_copy(update={"notes": "; ".join(row.notes)})

        if isinstance(secondary, NotFound):
            row.notes.append("secondary_not_found")
            return held.model_copy(update={"notes": "; ".join(row.notes)})

        row.notes.append(f"secondary_candidates={secondary.candidates}")
        score = compute_score(
            secondary.match_level,
            secondary.reverse_ok,
            secondary.candidates,
            secondary.postal_code,
            row.country,
            row.input_postal,
            provider_confidence=secondary.confidence,
        )
        challenger = row.result(
            status=status_for_score(score),
            score=score,
            lat=secondary.lat,
            lon=secondary.lon,
            provider="secondary",
            match_level=secondary.match_level,
            postal_code=secondary.postal_code,
        )
        best = pick_best(held, challenger)
        return best.model_copy(update={"notes": "; ".join(row.notes)})

    # -- failures -----------------------------------------------------------

    @staticmethod
    def _failed_row(record: AddressRecord, exc: Exception) -> VerificationResult:
        return VerificationResult(
            input_address=record.full_text(),
            cleaned_address="",
            normalized_address="",
            country="",
            status="error",
            score=0,
            provider="primary",
            notes=f"pipeline_error={type(exc).__name__}",
        )
