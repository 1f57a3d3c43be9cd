"""
Mood classifier adapters.

Every adapter exposes ``await classify(text) -> label`` and never raises to its
caller: any provider problem (network, status, timeout, bad payload) comes back
as the UNKNOWN label.
"""

import asyncio
import logging

from moodbite.services.clients import (
    AnthropicMessages,
    GeminiModels,
    HuggingFaceInference,
    OpenRouterChat,
)
from moodbite.services.errors import ProviderError
from moodbite.services.prompts import build_mood_prompt

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


class ClassifierAdapter:
    """Base class: subclasses implement ``_classify`` and may raise freely."""

    provider_id = "classifier"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def classify(self, text: str) -> str:
        try:
            if self.timeout is not None:
                label = await asyncio.wait_for(self._classify(text), self.timeout)
            else:
                label = await self._classify(text)
        except asyncio.TimeoutError:
            logger.warning(f"{self.provider_id} mood classifier timed out after {self.timeout}s")
            return UNKNOWN
        except ProviderError as e:
            logger.warning(f"{self.provider_id} mood classifier failed: {e.message}")
            return UNKNOWN
        except Exception as e:
            logger.warning(f"{self.provider_id} mood classifier raised {e!r}")
            return UNKNOWN

        if not isinstance(label, str):
            logger.warning(f"{self.provider_id} mood classifier returned a non-text label {label!r}")
            return UNKNOWN
        return label.strip() or UNKNOWN

    async def _classify(self, text: str) -> str:
        raise NotImplementedError


class HuggingFaceClassifier(ClassifierAdapter):
    """The emotion specialist: a fine-tuned RoBERTa on go_emotions."""

    provider_id = "RoBERTa"

    def __init__(self, inference: HuggingFaceInference, timeout: float | None = None):
        super().__init__(timeout)
        self.inference = inference

    async def _classify(self, text: str) -> str:
        return await self.inference.top_label(text)


class GeminiClassifier(ClassifierAdapter):
    provider_id = "Gemini"

    def __init__(self, models: GeminiModels, model: str, timeout: float | None = None):
        super().__init__(timeout)
        self.models = models
        self.model = model

    async def _classify(self, text: str) -> str:
        answer = await self.models.generate(self.model, build_mood_prompt(text))
        return answer.strip().lower()


class OpenRouterClassifier(ClassifierAdapter):
    provider_id = "Claude (via OpenRouter)"

    def __init__(self, chat: OpenRouterChat, timeout: float | None = None):
        super().__init__(timeout)
        self.chat = chat

    async def _classify(self, text: str) -> str:
        answer = await self.chat.complete(build_mood_prompt(text))
        return answer.strip().lower()


class AnthropicClassifier(ClassifierAdapter):
    provider_id = "Claude"

    def __init__(self, messages: AnthropicMessages, timeout: float | None = None):
        super().__init__(timeout)
        self.messages = messages

    async def _classify(self, text: str) -> str:
        answer = await self.messages.complete(build_mood_prompt(text), max_tokens=32)
        return answer.strip().lower()
