"""Verification package.

``models``   -- ``AddressRecord`` input and ``VerificationResult`` output.
``scoring``  -- score, status thresholds and best-of-two selection.
``pipeline`` -- per-row orchestration across the two geocoders.
"""
