"""Validation layer for raw provider insight responses.

Turns the provider's text into a normalized ``CountryInsights`` instance.
"""

import json
import logging
import math
import re
from datetime import datetime
from typing import List, Sequence, Tuple

from pydantic import ValidationError

from country_insights.schema import CarrierInfo, CountryInsights, ProviderCarrier, ProviderInsightPayload
from country_insights.shares import normalize_to_total, round_shares, total_share

logger = logging.getLogger(__name__)

DEFAULT_HOME_SHARE = 10.0
"""Share given to the home carrier when the provider leaves it out."""

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")


class InsightParseError(Exception):
    """Raised when a provider response cannot be turned into insights.

    Attributes:
        stage: Which step failed ("json_extract", "json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"Insight response validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapping the response, if present.

    Args:
        text: Raw provider response string.

    Returns:
        The text with a leading ```lang line and trailing ``` removed.
    """
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


def extract_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` span in *text*.

    Braces inside JSON string literals are ignored.

    Raises:
        InsightParseError: If no opening brace exists or it is never closed.
    """
    start = text.find("{")
    if start < 0:
        raise InsightParseError(
            stage="json_extract",
            errors=["no JSON object found in response"],
            raw_response=text,
        )

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    raise InsightParseError(
        stage="json_extract",
        errors=["JSON object is not closed"],
        raw_response=text,
    )


def parse_provider_payload(raw_response: str) -> ProviderInsightPayload:
    """Parse and schema-check a raw provider response.

    Steps:
        1. Strip optional markdown fences.
        2. Extract the first balanced JSON object.
        3. Parse as JSON.
        4. Validate against ProviderInsightPayload.

    Raises:
        InsightParseError: If any step fails.
    """
    candidate = extract_json_object(strip_code_fences(raw_response or ""))

    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as exc:
        raise InsightParseError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    try:
        return ProviderInsightPayload.model_validate(data)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise InsightParseError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        ) from exc


def is_home_carrier_name(name: str, home_carrier: str) -> bool:
    """Case-insensitive brand match, e.g. "FedEx Express" matches "fedex"."""
    return home_carrier.casefold() in name.casefold()


def finalize_carriers(
    carriers: Sequence[ProviderCarrier],
    home_carrier: str,
    default_home_share: float = DEFAULT_HOME_SHARE,
) -> Tuple[CarrierInfo, ...]:
    """Flag the home carrier, add it if missing, and normalize shares.

    Only the first carrier matching *home_carrier* is flagged. Shares are
    normalized to exactly 100 and then rounded to one decimal.
    """
    names = [carrier.name for carrier in carriers]
    shares = [carrier.market_share for carrier in carriers]

    home_index = next(
        (i for i, name in enumerate(names) if is_home_carrier_name(name, home_carrier)),
        None,
    )
    if home_index is None:
        logger.warning("%s missing from provider carriers, adding it at %.1f%%", home_carrier, default_home_share)
        names.append(home_carrier)
        shares.append(default_home_share)
        home_index = len(names) - 1

    raw_total = sum(shares)
    if not all(math.isfinite(share) for share in shares) or not math.isfinite(raw_total):
        raise InsightParseError(
            stage="schema",
            errors=[f"carrier market shares are not finite (total={raw_total})"],
            raw_response="",
        )
    if abs(raw_total - 100.0) > 1.0:
        logger.warning("Provider market shares total %.1f%%, rescaling to 100%%", raw_total)

    rounded = round_shares(normalize_to_total(shares))
    logger.debug("Normalized carrier shares total=%.1f", total_share(rounded))

    return tuple(
        CarrierInfo(name=name, market_share=share, is_home_carrier=index == home_index)
        for index, (name, share) in enumerate(zip(names, rounded))
    )


def validate_insight_response(
    country: str,
    raw_response: str,
    *,
    home_carrier: str,
    generated_at: datetime,
) -> CountryInsights:
    """Build validated ``CountryInsights`` from a raw provider response.

    Raises:
        InsightParseError: If the response is malformed or misses a field.
    """
    payload = parse_provider_payload(raw_response)
    try:
        carriers = finalize_carriers(payload.carriers, home_carrier)
    except InsightParseError as exc:
        raise InsightParseError(exc.stage, exc.errors, raw_response) from exc

    try:
        return CountryInsights(
            country=country,
            carriers=carriers,
            sentiment_text=payload.sentiment_text,
            sales_tips=tuple(payload.sales_tips),
            email_template=payload.email_template,
            generated_at=generated_at,
        )
    except ValidationError as exc:
        raise InsightParseError(
            stage="schema",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc
