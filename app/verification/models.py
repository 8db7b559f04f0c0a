"""Input and output records of the verification pipeline."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

VerificationStatus = Literal["valid", "ambiguous", "not_found", "error"]
ProviderName = Literal["primary", "secondary"]
MatchLevelOut = Literal["house", "street", "locality", "unknown"]


class AddressRecord(BaseModel):
    """One uploaded address row.

    Either free text (``address``, optional ``country``) or structured
    fields (``street``, ``city``, ``zip``, ``province``, ``country``).
    Blank rows are accepted; the pipeline reports them as ``error`` rows.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str = ""
    country: str | None = None
    street: str | None = None
    city: str | None = None
    zip: str | None = None
    province: str | None = None

    @property
    def has_structured_fields(self) -> bool:
        return bool((self.street or "").strip() and (self.city or "").strip() and (self.province or "").strip())

    def full_text(self) -> str:
        """Return the free-text address, joining structured fields when absent.

        A country on its own is not an address; such a row yields ``""``.
        """
        if self.address.strip():
            return self.address
        fields = [self.street, self.city, self.province, self.zip]
        if not any(f and f.strip() for f in fields):
            return ""
        parts = fields + [self.country]
        return ", ".join(p.strip() for p in parts if p and p.strip())


class VerificationResult(BaseModel):
    input_address: str
    cleaned_address: str
    normalized_address: str
    country: str
    status: VerificationStatus
    score: int = Field(ge=0, le=100)
    lat: float | None = None
    lon: float | None = None
    provider: ProviderName
    match_level: MatchLevelOut | None = None
    postal_code: str | None = None
    notes: str | None = None


class VerifyRequest(BaseModel):
    rows: list[AddressRecord]
    default_country: str | None = None
    debug: bool = False


class VerifyResponse(BaseModel):
    data: list[VerificationResult]
