"""
Suggestion adapters, one per hosted generative model.

``await generate(prompt)`` returns a SuggestionCandidate on success and a
Failure on any network, parse or validation problem. Adapters never raise.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field

from moodbite.services.clients import (
    AnthropicMessages,
    GeminiModels,
    OpenRouterChat,
    extract_json,
)
from moodbite.services.errors import Failure, MalformedResponse, ProviderError, ProviderUnavailable

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("suggestedFood", "reason", "confidenceScore")


@dataclass(frozen=True)
class SuggestionCandidate:
    predicted_mood: str
    suggested_food: str
    reason: str
    confidence_score: int
    other_suggestions: list[str] = field(default_factory=list)
    provider_id: str = ""


def normalize_confidence(raw) -> int:
    """Bring a provider's confidence onto the 0-100 integer scale.

    Fractions in [0, 2) are read as 0-1 style scores and scaled by 100.
    Anything above 100 is clamped. Negative, non-finite or non-numeric
    values raise ValueError.
    """
    if isinstance(raw, bool):
        raise ValueError(f"confidence must be numeric, got {raw!r}")
    score = float(raw)
    if math.isnan(score) or math.isinf(score) or score < 0:
        raise ValueError(f"confidence out of range: {raw!r}")
    if score < 2:
        score *= 100
    return min(100, int(round(score)))


def parse_candidate(data, provider_id: str) -> SuggestionCandidate:
    """Validate a decoded provider payload and build a candidate from it."""
    if not isinstance(data, dict):
        raise MalformedResponse(provider_id, f"expected a JSON object, got {type(data).__name__}")

    missing = [k for k in REQUIRED_FIELDS if data.get(k) in (None, "")]
    if missing:
        raise MalformedResponse(provider_id, f"missing required fields: {', '.join(missing)}")

    try:
        confidence = normalize_confidence(data["confidenceScore"])
    except (TypeError, ValueError) as e:
        raise MalformedResponse(provider_id, f"invalid confidenceScore: {e}") from e

    others = data.get("otherSuggestions")
    if not isinstance(others, list):
        others = []

    return SuggestionCandidate(
        predicted_mood=str(data.get("predictedMood") or ""),
        suggested_food=str(data["suggestedFood"]).strip(),
        reason=str(data["reason"]).strip(),
        confidence_score=confidence,
        other_suggestions=[str(o).strip() for o in others if str(o).strip()],
        provider_id=provider_id,
    )


class SuggestionAdapter:
    """Base class: subclasses implement ``_complete`` returning the raw model text."""

    provider_id = "suggester"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def generate(self, prompt: str) -> SuggestionCandidate | Failure:
        try:
            if self.timeout is not None:
                raw = await asyncio.wait_for(self._complete(prompt), self.timeout)
            else:
                raw = await self._complete(prompt)
            try:
                data = extract_json(raw)
            except ValueError as e:
                raise MalformedResponse(self.provider_id, f"response is not valid JSON: {e}") from e
            candidate = parse_candidate(data, self.provider_id)
        except asyncio.TimeoutError:
            error = ProviderUnavailable(self.provider_id, f"timed out after {self.timeout}s")
        except ProviderError as e:
            error = e
        except Exception as e:
            error = ProviderUnavailable(self.provider_id, f"unexpected error: {e!r}")
        else:
            return candidate

        logger.warning(f"{self.provider_id} suggestion failed: {error.message}")
        return Failure(self.provider_id, error)

    async def _complete(self, prompt: str) -> str:
        raise NotImplementedError


class GeminiSuggester(SuggestionAdapter):
    provider_id = "Gemini"

    def __init__(self, models: GeminiModels, model: str, timeout: float | None = None):
        super().__init__(timeout)
        self.models = models
        self.model = model

    async def _complete(self, prompt: str) -> str:
        return await self.models.generate(self.model, prompt, temperature=0.9)


class OpenRouterSuggester(SuggestionAdapter):
    provider_id = "Claude 3 Haiku (via OpenRouter)"

    def __init__(self, chat: OpenRouterChat, timeout: float | None = None):
        super().__init__(timeout)
        self.chat = chat

    async def _complete(self, prompt: str) -> str:
        return await self.chat.complete(prompt)


class AnthropicSuggester(SuggestionAdapter):
    provider_id = "Claude"

    def __init__(self, messages: AnthropicMessages, timeout: float | None = None):
        super().__init__(timeout)
        self.messages = messages

    async def _complete(self, prompt: str) -> str:
        return await self.messages.complete(prompt, max_tokens=1024)
