"""POST /verify -- run the verification pipeline over a batch of rows.

The caller (upload UI) has already parsed its spreadsheet into
``AddressRecord`` rows.  The response carries one ``VerificationResult`` per
row, in input order.  The route is synchronous: FastAPI runs it in its
worker thread pool, so primary-provider pacing blocks only this request.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_pipeline
from app.verification.models import VerifyRequest, VerifyResponse
from app.verification.pipeline import VerificationPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verify"])


@router.post("/verify", response_model=VerifyResponse, summary="Verify a batch of addresses")
def verify_addresses(
    body: VerifyRequest,
    pipeline: VerificationPipeline = Depends(get_pipeline),
) -> VerifyResponse:
    if not body.rows:
        raise HTTPException(status_code=400, detail="Body must be { rows: AddressRecord[], debug? }")

    logger.info("POST /verify: %d rows", len(body.rows))
    results = pipeline.verify_batch(body.rows, body.default_country, debug=body.debug)
    return VerifyResponse(data=results)
