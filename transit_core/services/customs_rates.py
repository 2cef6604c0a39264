# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Customs rates provider.

Rates change by government decree, so they are fetched from the rates API
and kept in memory. When the API cannot be reached the last good schedule
is served (with a warning once it is older than the cache TTL), and as a
last resort the reference schedule below.
"""

import math
import os
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import requests
from opentelemetry import trace
from pydantic import ValidationError

from transit_core.domain.customs import validate_customs_rates
from transit_core.errors import ConfigurationError, RatesUnavailableError
from transit_core.models.entities import CustomsRates

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


CACHE_TTL_DAYS = 7
STALE_AFTER_DAYS = 30
DEFAULT_TIMEOUT = 10

REFERENCE_SCHEDULE: Dict[str, Any] = {
    "dd": "0.20",
    "rtl": "0.02",
    "rdl": "0.015",
    "tvs": "0.18",
    "source": "Décret Gouvernemental 2026-01 / Customs Authority",
    "source_url": "https://douanes.gov.gn/decrets/2026-01",
    "version_id": "2026-01-v1",
    "signed_by": "Direction Générale des Douanes - Guinée",
    "signed_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
}

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def _as_datetime(moment) -> datetime:
    if isinstance(moment, datetime):
        return moment
    if isinstance(moment, date):
        return datetime(moment.year, moment.month, moment.day)
    if isinstance(moment, str):
        return datetime.fromisoformat(moment.replace("Z", "+00:00"))
    raise TypeError(f"Expected a date or datetime, got {type(moment).__name__}")


def days_since(moment, now: Optional[datetime] = None) -> int:
    """
    Whole days elapsed since a moment, rounded down.

    Future moments give negative values (tomorrow is -1).
    """
    moment = _as_datetime(moment)
    if now is None:
        now = datetime.now(timezone.utc) if moment.tzinfo else datetime.now()
    # Naive values are taken as UTC when compared with aware ones
    if moment.tzinfo is None and now.tzinfo is not None:
        moment = moment.replace(tzinfo=timezone.utc)
    elif now.tzinfo is None and moment.tzinfo is not None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = (now - moment).total_seconds()
    return math.floor(elapsed / 86400)


def is_rates_stale(last_update, now: Optional[datetime] = None) -> bool:
    """True when rates are more than 30 days old; exactly 30 days is still fresh."""
    return days_since(last_update, now=now) > STALE_AFTER_DAYS


def format_last_update(moment) -> str:
    """
    Format a rates publication time in French.

    >>> format_last_update(datetime(2026, 1, 15, 10, 30))
    '15 janvier 2026 à 10:30'
    """
    moment = _as_datetime(moment)
    return f"{moment.day} {FRENCH_MONTHS[moment.month - 1]} {moment.year} à {moment:%H:%M}"


def reference_rates(now: Optional[datetime] = None) -> CustomsRates:
    """Reference schedule stamped with the current time."""
    return CustomsRates(**REFERENCE_SCHEDULE, last_update=now or datetime.now(timezone.utc))


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


class CustomsRatesService:
    """
    Customs rates provider with in-memory fallback.

    Configuration comes from constructor arguments, then the environment:
    CUSTOMS_RATES_API_URL, CUSTOMS_RATES_TIMEOUT, ENVIRONMENT, USE_MOCK_DATA.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        environment: Optional[str] = None,
        use_mock_data: Optional[bool] = None,
    ):
        self.api_url = api_url or os.getenv("CUSTOMS_RATES_API_URL")
        self.timeout = timeout or float(os.getenv("CUSTOMS_RATES_TIMEOUT", DEFAULT_TIMEOUT))
        self.environment = environment or os.getenv("ENVIRONMENT", "development")
        self.use_mock_data = _env_flag("USE_MOCK_DATA") if use_mock_data is None else use_mock_data

        if self.environment == "production" and not self.api_url and not self.use_mock_data:
            raise ConfigurationError(
                "Reference customs rates are not allowed in production: configure "
                "CUSTOMS_RATES_API_URL or set USE_MOCK_DATA=true for staging"
            )

        self.session = session or requests.Session()
        self._cached_rates: Optional[CustomsRates] = None
        self._cached_at: Optional[datetime] = None

        if not self.api_url:
            logger.warning("No CUSTOMS_RATES_API_URL configured, reference rates will be served")

    @property
    def cached_rates(self) -> Optional[CustomsRates]:
        return self._cached_rates

    def fetch_current_rates(self, now: Optional[datetime] = None) -> CustomsRates:
        """
        Get the current customs rate schedule.

        Never raises for network or payload problems: falls back to the
        cached schedule, then to the reference schedule.

        Returns:
            CustomsRates
        """
        now = now or datetime.now(timezone.utc)

        with tracer.start_as_current_span("customs_rates.fetch") as span:
            span.set_attribute("customs_rates.api_configured", bool(self.api_url))

            if not self.api_url:
                rates = reference_rates(now)
                self._store(rates, now)
                span.set_attribute("customs_rates.source", "reference")
                return rates

            try:
                rates = self._fetch_remote(now)
            except (requests.RequestException, ValidationError, ValueError, RatesUnavailableError) as e:
                span.record_exception(e)
                logger.error(
                    "Failed to fetch customs rates from API",
                    extra={"api_url": self.api_url, "error": str(e)}
                )
                rates, source = self._fallback(now)
                span.set_attribute("customs_rates.source", source)
                return rates

            self._store(rates, now)
            span.set_attributes({
                "customs_rates.source": "api",
                "customs_rates.version": rates.version_id or "",
            })
            logger.info(
                "Customs rates loaded from API",
                extra={
                    "source": rates.source,
                    "version_id": rates.version_id,
                    "dd": str(rates.dd),
                    "rtl": str(rates.rtl),
                    "rdl": str(rates.rdl),
                    "tvs": str(rates.tvs),
                }
            )
            return rates

    def _fetch_remote(self, now: datetime) -> CustomsRates:
        response = self.session.get(self.api_url, timeout=self.timeout)
        response.raise_for_status()

        rates = CustomsRates.model_validate(response.json())
        if not validate_customs_rates(rates):
            raise RatesUnavailableError("Customs rates outside the [0, 1] range")

        if rates.last_update is None:
            rates = rates.model_copy(update={"last_update": now})
        return rates

    def _store(self, rates: CustomsRates, now: datetime) -> None:
        self._cached_rates = rates
        self._cached_at = now

    def _fallback(self, now: datetime):
        if self._cached_rates is not None:
            age = days_since(self._cached_rates.last_update or self._cached_at, now=now)
            if age > CACHE_TTL_DAYS:
                logger.warning(
                    "Cached customs rates are stale",
                    extra={"age_in_days": age, "max_age_days": CACHE_TTL_DAYS}
                )
            logger.info(
                "Customs rates served from cache",
                extra={"age_in_days": age, "source": self._cached_rates.source}
            )
            return self._cached_rates, "cache"

        logger.warning("Network and cache unavailable, serving reference customs rates")
        return reference_rates(now), "reference"
