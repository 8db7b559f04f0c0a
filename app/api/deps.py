"""FastAPI dependency injection -- pipeline factory."""
from __future__ import annotations

from app.verification.pipeline import VerificationPipeline


def get_pipeline() -> VerificationPipeline:
    """Return a pipeline wired from current settings.

    Built per request so each batch gets fresh clients; pacing state lives
    in the batch, not here.
    """
    return VerificationPipeline.from_settings()
