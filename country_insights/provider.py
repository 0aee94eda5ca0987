"""Ordered model-variant fallback for insight generation.

Each model variant is tried in preference order. Every attempt resolves to
an explicit outcome:

    ProviderSuccess  -> stop, use the text
    ProviderSkip     -> the variant is unavailable (not found), try the next
    ProviderFatal    -> auth, quota, bad request, network or empty output; stop

When every variant is skipped the loop returns ``ProviderExhausted``.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import openai

from app.logging_utils import log_event
from country_insights.adapter import BaseLLMAdapter

logger = logging.getLogger(__name__)

_UNAVAILABLE_MARKERS = ("not found", "404")


class EmptyProviderResponseError(RuntimeError):
    """Raised when a model variant answers with no text."""


class ProviderFatalError(RuntimeError):
    """Raised to callers that opt out of synthetic fallback on fatal errors.

    Attributes:
        model: The variant whose failure aborted the loop.
    """

    def __init__(self, model: str, error: BaseException) -> None:
        self.model = model
        self.error = error
        super().__init__(f"Insight provider failed on model '{model}': {error}")


@dataclass(frozen=True)
class ProviderSuccess:
    model: str
    text: str


@dataclass(frozen=True)
class ProviderSkip:
    model: str
    reason: str


@dataclass(frozen=True)
class ProviderFatal:
    model: str
    error: BaseException


@dataclass(frozen=True)
class ProviderExhausted:
    skipped: Tuple[ProviderSkip, ...]


ProviderAttempt = Union[ProviderSuccess, ProviderSkip, ProviderFatal]
ProviderResult = Union[ProviderSuccess, ProviderFatal, ProviderExhausted]


def is_model_unavailable(exc: BaseException) -> bool:
    """Return True when *exc* means the model variant does not exist."""
    if isinstance(exc, openai.NotFoundError):
        return True
    if getattr(exc, "status_code", None) == 404:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


def classify_provider_error(model: str, exc: BaseException) -> Union[ProviderSkip, ProviderFatal]:
    """Map a provider exception to a skip or a fatal outcome."""
    if is_model_unavailable(exc):
        return ProviderSkip(model=model, reason=str(exc) or type(exc).__name__)
    return ProviderFatal(model=model, error=exc)


async def attempt_model(adapter: BaseLLMAdapter, prompt: str, model: str) -> ProviderAttempt:
    """Run one model variant and classify the result."""
    try:
        text = await adapter.generate(prompt, model=model)
    except Exception as exc:  # noqa: BLE001
        return classify_provider_error(model, exc)

    if not text or not text.strip():
        return ProviderFatal(
            model=model,
            error=EmptyProviderResponseError(f"No response text from model '{model}'."),
        )
    return ProviderSuccess(model=model, text=text)


async def generate_with_fallback(
    adapter: BaseLLMAdapter,
    prompt: str,
    model_variants: Sequence[str],
) -> ProviderResult:
    """Try *model_variants* in order with the same prompt.

    Args:
        adapter: Adapter implementing ``await generate(prompt, model=...)``.
        prompt: The fully formatted prompt string.
        model_variants: Variant identifiers, most preferred first.

    Returns:
        ``ProviderSuccess`` with the first variant's text, ``ProviderFatal``
        for the first non-availability failure, or ``ProviderExhausted``
        when every variant was unavailable.
    """
    skipped = []
    total = len(model_variants)

    for position, model in enumerate(model_variants, start=1):
        outcome = await attempt_model(adapter, prompt, model)

        if isinstance(outcome, ProviderSuccess):
            log_event(
                logger,
                logging.INFO,
                "insight_provider_success",
                model=model,
                attempt=position,
                response_chars=len(outcome.text),
            )
            return outcome

        if isinstance(outcome, ProviderSkip):
            skipped.append(outcome)
            log_event(
                logger,
                logging.WARNING,
                "insight_provider_skip",
                model=model,
                attempt=position,
                attempts_total=total,
                reason=outcome.reason,
            )
            continue

        log_event(
            logger,
            logging.ERROR,
            "insight_provider_fatal",
            model=model,
            attempt=position,
            error_type=type(outcome.error).__name__,
            error=str(outcome.error),
        )
        return outcome

    logger.error("All %d insight model variant(s) unavailable", total)
    return ProviderExhausted(skipped=tuple(skipped))
