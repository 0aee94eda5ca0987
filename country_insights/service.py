"""Country insight acquisition.

Orchestrates one request:

    cache hit                -> return cached insights
    no provider credential   -> synthetic insights
    provider loop success    -> validated insights (synthetic on parse failure)
    provider loop exhausted  -> synthetic insights
    provider fatal error     -> synthetic insights, or ProviderFatalError when
                                the service is built with fallback_on_fatal=False

Every result, provider or synthetic, is written to the cache before it is
returned. The only suspension point is the provider network call; there is
no de-duplication of concurrent requests for the same country.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from app.config import InsightProviderSettings, get_insight_provider_settings
from country_insights.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from country_insights.cache import InsightCache
from country_insights.prompt_builder import InsightPromptBuilder
from country_insights.provider import (
    ProviderFatal,
    ProviderFatalError,
    ProviderSuccess,
    generate_with_fallback,
)
from country_insights.schema import CountryInsights
from country_insights.synthetic import SyntheticInsightGenerator
from country_insights.validator import InsightParseError, validate_insight_response

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "country_insights_"


def insight_cache_key(country: str) -> str:
    """Cache key for *country*. Matching is exact and case-sensitive."""
    return f"{CACHE_KEY_PREFIX}{country}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InsightService:
    """Three-tier insight acquisition: cache, live provider, synthetic.

    Args:
        cache: Session cache the service reads from and writes to.
        adapter: Provider adapter, or None when no credential is configured.
        model_variants: Model identifiers, most preferred first.
        home_carrier: Brand flagged as the home carrier.
        fallback_on_fatal: Convert fatal provider errors into synthetic
            insights (default) instead of raising ``ProviderFatalError``.
        clock: Source of ``generated_at`` timestamps.
    """

    def __init__(
        self,
        *,
        cache: InsightCache,
        adapter: Optional[BaseLLMAdapter],
        model_variants: Sequence[str],
        home_carrier: str = "FedEx",
        fallback_on_fatal: bool = True,
        prompt_builder: Optional[InsightPromptBuilder] = None,
        synthetic: Optional[SyntheticInsightGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._cache = cache
        self._adapter = adapter
        self._model_variants = tuple(model_variants)
        self._home_carrier = home_carrier
        self._fallback_on_fatal = fallback_on_fatal
        self._prompt_builder = prompt_builder or InsightPromptBuilder()
        self._synthetic = synthetic or SyntheticInsightGenerator(home_carrier=home_carrier)
        self._clock = clock or _utc_now

    @property
    def cache(self) -> InsightCache:
        return self._cache

    @property
    def has_provider(self) -> bool:
        return self._adapter is not None and bool(self._model_variants)

    async def get_country_insights(
        self,
        country: str,
        revenue: float,
        bookings: int,
    ) -> CountryInsights:
        """Return insights for *country*, acquiring and caching them if needed.

        Args:
            country: Country name exactly as used for cache keys.
            revenue: Country revenue in euros, used in the prompt.
            bookings: Country booking volume, used in the prompt.

        Raises:
            ValueError: If *country* is blank.
            ProviderFatalError: Only when ``fallback_on_fatal`` is False.
        """
        if not country or not country.strip():
            raise ValueError("country must be a non-empty string")

        key = insight_cache_key(country)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Using cached insights for %s", country)
            return cached

        if not self.has_provider:
            logger.warning("No insight provider credential configured, using synthetic insights for %s", country)
            return self._store(key, self._synthesize(country, revenue, bookings))

        prompt = self._prompt_builder.build_prompt(
            country, revenue, bookings, home_carrier=self._home_carrier
        )
        result = await generate_with_fallback(self._adapter, prompt, self._model_variants)

        if isinstance(result, ProviderSuccess):
            try:
                insights = validate_insight_response(
                    country,
                    result.text,
                    home_carrier=self._home_carrier,
                    generated_at=self._clock(),
                )
            except InsightParseError as exc:
                logger.warning(
                    "Insight response from %s for %s rejected at stage '%s': %s",
                    result.model,
                    country,
                    exc.stage,
                    "; ".join(exc.errors),
                )
                insights = self._synthesize(country, revenue, bookings)
        elif isinstance(result, ProviderFatal):
            if not self._fallback_on_fatal:
                raise ProviderFatalError(result.model, result.error) from result.error
            logger.error(
                "Insight provider failed for %s on %s, using synthetic insights: %s",
                country,
                result.model,
                result.error,
            )
            insights = self._synthesize(country, revenue, bookings)
        else:
            logger.warning("No insight model variant available for %s, using synthetic insights", country)
            insights = self._synthesize(country, revenue, bookings)

        return self._store(key, insights)

    def clear_insights_cache(self) -> int:
        """Remove every cached country insight. Returns the number removed."""
        keys = [key for key in self._cache.list_keys() if key.startswith(CACHE_KEY_PREFIX)]
        for key in keys:
            self._cache.remove(key)
        logger.info("Cleared %d cached country insight(s)", len(keys))
        return len(keys)

    def cached_countries(self) -> list[str]:
        return [
            key[len(CACHE_KEY_PREFIX) :]
            for key in self._cache.list_keys()
            if key.startswith(CACHE_KEY_PREFIX)
        ]

    def _synthesize(self, country: str, revenue: float, bookings: int) -> CountryInsights:
        return self._synthetic.generate(country, revenue, bookings, generated_at=self._clock())

    def _store(self, key: str, insights: CountryInsights) -> CountryInsights:
        self._cache.set(key, insights)
        return insights


def build_adapter(settings: InsightProviderSettings) -> Optional[BaseLLMAdapter]:
    """Instantiate the adapter selected by settings.

    INSIGHT_ADAPTER=mock   -> MockLLMAdapter (no credential required)
    INSIGHT_ADAPTER=openai -> OpenAILLMAdapter, or None without an API key
    """
    if settings.adapter == "mock":
        return MockLLMAdapter()
    if not settings.api_key:
        return None
    return OpenAILLMAdapter(
        api_key=settings.api_key,
        base_url=settings.base_url,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


def build_insight_service(
    cache: InsightCache,
    settings: Optional[InsightProviderSettings] = None,
) -> InsightService:
    """Build an ``InsightService`` for one session cache from settings."""
    resolved = settings or get_insight_provider_settings()
    return InsightService(
        cache=cache,
        adapter=build_adapter(resolved),
        model_variants=resolved.model_variants,
        home_carrier=resolved.home_carrier,
    )
