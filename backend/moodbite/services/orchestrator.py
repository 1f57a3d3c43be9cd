"""
Suggestion orchestration across several generators.

Two strategies share one interface:
  fallback    - try adapters in priority order, stop at the first success
  competition - run every adapter at once, keep the most confident success
"""

import asyncio
import logging
from enum import Enum

from moodbite.services.errors import AllSuggestionProvidersFailed, Failure, ProviderUnavailable
from moodbite.services.suggesters import SuggestionAdapter, SuggestionCandidate

logger = logging.getLogger(__name__)


class SuggestionStrategy(str, Enum):
    FALLBACK = "fallback"
    COMPETITION = "competition"


def pick_most_confident(candidates: list[SuggestionCandidate]) -> SuggestionCandidate:
    """Strictly highest confidence wins; on a tie the earlier (higher-priority) one stays."""
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.confidence_score > best.confidence_score:
            best = candidate
    return best


class SuggestionOrchestrator:
    def __init__(
        self,
        adapters: list[SuggestionAdapter],
        strategy: SuggestionStrategy | str = SuggestionStrategy.FALLBACK,
    ):
        self.adapters = list(adapters)
        self.strategy = SuggestionStrategy(strategy)

    async def select(self, prompt: str) -> SuggestionCandidate:
        if not self.adapters:
            raise AllSuggestionProvidersFailed([])
        if self.strategy is SuggestionStrategy.COMPETITION:
            return await self._compete(prompt)
        return await self._fall_back(prompt)

    async def _fall_back(self, prompt: str) -> SuggestionCandidate:
        failures: list[Failure] = []
        for position, adapter in enumerate(self.adapters):
            if position == 0:
                logger.info(f"Requesting suggestion from primary model ({adapter.provider_id})")
            else:
                logger.info(f"Falling back to {adapter.provider_id}")

            outcome = await self._settle(adapter, prompt)
            if isinstance(outcome, Failure):
                failures.append(outcome)
                continue

            logger.info(f"Suggestion received from {outcome.provider_id}")
            return outcome

        raise AllSuggestionProvidersFailed(failures)

    async def _settle(self, adapter: SuggestionAdapter, prompt: str) -> SuggestionCandidate | Failure:
        try:
            return await adapter.generate(prompt)
        except Exception as e:
            return Failure(adapter.provider_id, ProviderUnavailable(adapter.provider_id, f"unexpected error: {e!r}"))

    async def _compete(self, prompt: str) -> SuggestionCandidate:
        logger.info(f"Running {len(self.adapters)} suggestion models in competition")
        outcomes = await asyncio.gather(*(self._settle(a, prompt) for a in self.adapters))

        candidates = [o for o in outcomes if not isinstance(o, Failure)]
        failures = [o for o in outcomes if isinstance(o, Failure)]
        if not candidates:
            raise AllSuggestionProvidersFailed(failures)

        winner = pick_most_confident(candidates)
        scores = ", ".join(f"{c.provider_id}: {c.confidence_score}" for c in candidates)
        logger.info(f"Competition scores -> {scores}; winner {winner.provider_id}")
        return winner
