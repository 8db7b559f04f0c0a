import logging

from app.core.logging import PIISafeFilter


def _filtered_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.filters = []
    logger.addFilter(PIISafeFilter())
    return logger


def test_pii_filter_redacts_email_and_phone(caplog):
    logger = _filtered_logger("test.pii")

    with caplog.at_level(logging.INFO, logger="test.pii"):
        logger.info("Contact john.doe@example.com or (555) 123-4567")

    assert "john.doe@example.com" not in caplog.text
    assert "123-4567" not in caplog.text
    assert "[REDACTED]" in caplog.text


def test_pii_filter_redacts_international_phone_in_args(caplog):
    logger = _filtered_logger("test.intl")

    with caplog.at_level(logging.INFO, logger="test.intl"):
        logger.info("row contact %s", "+44 20 7946 0958")

    assert "7946" not in caplog.text
    assert "[REDACTED]" in caplog.text


def test_pii_filter_masks_api_key(caplog):
    logger = _filtered_logger("test.key")

    with caplog.at_level(logging.INFO, logger="test.key"):
        logger.info("GET /geocode/v1/json?q=x&key=abc123secret&limit=3")

    assert "abc123secret" not in caplog.text
    assert "key=****" in caplog.text
    assert "limit=3" in caplog.text
