"""Geocoder clients.

``nominatim``  -- primary provider, free-form and structured search, paced.
``opencage``   -- secondary keyed provider, used as a fallback.

Clients return :mod:`app.geocoding.results` variants and never raise on
provider failures.
"""
