"""
Mood arbitration: ask every classifier at once, then take a majority vote.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field

from moodbite.services.classifiers import UNKNOWN, ClassifierAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoodVote:
    provider_id: str
    label: str


@dataclass(frozen=True)
class ArbitrationResult:
    winning_label: str
    vote_counts: dict[str, int] = field(default_factory=dict)
    participant_count: int = 0
    votes: tuple[MoodVote, ...] = ()

    @property
    def degraded(self) -> bool:
        """True when no classifier produced a usable label."""
        return not self.vote_counts


def judge_votes(votes: list[MoodVote]) -> ArbitrationResult:
    """Majority vote over ``votes`` given in provider priority order.

    The first provider's raw vote is the initial winner and the running best
    count starts at 0; a label only takes over with a strictly greater count.
    Labels are scanned in order of first appearance, so ties go to the label
    reached first and an all-UNKNOWN set yields the first provider's vote.
    """
    if not votes:
        return ArbitrationResult(winning_label=UNKNOWN)

    counts = Counter(v.label for v in votes if v.label != UNKNOWN)

    winner = votes[0].label
    max_count = 0
    for label, count in counts.items():
        if count > max_count:
            winner = label
            max_count = count

    return ArbitrationResult(
        winning_label=winner,
        vote_counts=dict(counts),
        participant_count=len(votes),
        votes=tuple(votes),
    )


class MoodArbiter:
    def __init__(self, classifiers: list[ClassifierAdapter]):
        self.classifiers = list(classifiers)

    async def _vote(self, classifier: ClassifierAdapter, text: str) -> MoodVote:
        try:
            label = await classifier.classify(text)
        except Exception as e:
            logger.warning(f"{classifier.provider_id} escaped its adapter with {e!r}")
            label = UNKNOWN
        return MoodVote(classifier.provider_id, label)

    async def arbitrate(self, text: str) -> ArbitrationResult:
        logger.info(f"Consulting {len(self.classifiers)} mood classifiers")
        votes = await asyncio.gather(*(self._vote(c, text) for c in self.classifiers))

        logger.info("Mood votes -> " + ", ".join(f"{v.provider_id}: {v.label}" for v in votes))
        result = judge_votes(list(votes))
        if result.degraded:
            logger.warning(f"No classifier produced a mood; falling back to {result.winning_label!r}")
        else:
            logger.info(f"Judged mood (majority vote): {result.winning_label}")
        return result
