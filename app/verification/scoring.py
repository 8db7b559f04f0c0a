"""Confidence scoring and provider selection.

``compute_score()`` turns one provider match into an integer in ``[0, 100]``:

=====================================================  ======
Match level house / street / locality / unknown        +50 / +35 / +20 / +0
Both coordinates present                               +20
Found postal code valid for the country                +10
Input postal code valid and equal to the found one     +15
Any successful response                                +10
Four or more candidates                                -15
Secondary provider confidence (clamped to 0..10)       +0..10
=====================================================  ======

The two postal bonuses stack.  The sum is clamped to ``[0, 100]``.
"""
from __future__ import annotations

from app.normalization.postal import validate_postal
from app.verification.models import VerificationResult, VerificationStatus

VALID_THRESHOLD = 80
AMBIGUOUS_THRESHOLD = 60
AMBIGUOUS_CANDIDATES = 4

_MATCH_LEVEL_POINTS: dict[str, int] = {
    "house": 50,
    "street": 35,
    "locality": 20,
}


def _clamp(score: float) -> int:
    return int(max(0, min(100, score)))


def compute_score(
    match_level: str | None,
    reverse_ok: bool,
    candidates: int,
    postal: str | None,
    country: str | None,
    input_postal: str | None = None,
    provider_confidence: float | None = None,
) -> int:
    """Return the confidence score for one provider match.

    Parameters
    ----------
    match_level:
        ``"house"``, ``"street"``, ``"locality"`` or ``"unknown"``.
    reverse_ok:
        ``True`` when the matched candidate carries both coordinates.
    candidates:
        Number of candidates the provider returned.
    postal:
        Postal code on the matched candidate, if any.
    country:
        ISO-3166-1 alpha-2 code selecting the postal validator.
    input_postal:
        The input address's own postal code, for the exact-match bonus.
    provider_confidence:
        Secondary provider's 0-10 confidence; ``None`` for the primary.
    """
    score: float = _MATCH_LEVEL_POINTS.get(match_level or "", 0)

    if reverse_ok:
        score += 20

    if postal and validate_postal(postal, country):
        score += 10

    if (
        input_postal
        and validate_postal(input_postal, country)
        and postal
        and postal.strip().upper() == input_postal.strip().upper()
    ):
        score += 15

    score += 10

    if candidates >= AMBIGUOUS_CANDIDATES:
        score -= 15

    if provider_confidence is not None:
        score += min(10, max(0, provider_confidence))

    return _clamp(score)


def status_for_score(score: int) -> VerificationStatus:
    """``>= 80`` valid, ``>= 60`` ambiguous, otherwise not_found."""
    if score >= VALID_THRESHOLD:
        return "valid"
    if score >= AMBIGUOUS_THRESHOLD:
        return "ambiguous"
    return "not_found"


def pick_best(held: VerificationResult, challenger: VerificationResult) -> VerificationResult:
    """Return the higher-scoring result; *held* wins ties."""
    return held if held.score >= challenger.score else challenger
