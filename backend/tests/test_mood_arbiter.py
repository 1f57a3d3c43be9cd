import asyncio

from fakes import Barrier, FakeClassifier

from moodbite.services.classifiers import UNKNOWN
from moodbite.services.errors import ProviderUnavailable
from moodbite.services.mood_arbiter import MoodArbiter, MoodVote, judge_votes


def arbitrate(*classifiers, text="I had a long day"):
    return asyncio.run(MoodArbiter(list(classifiers)).arbitrate(text))


class TestJudgeVotes:
    def test_strict_plurality_wins(self):
        votes = [MoodVote("A", "sadness"), MoodVote("B", "joy"), MoodVote("C", "joy")]
        result = judge_votes(votes)
        assert result.winning_label == "joy"
        assert result.vote_counts == {"sadness": 1, "joy": 2}
        assert result.participant_count == 3

    def test_all_unknown_returns_first_provider_vote(self):
        votes = [MoodVote("A", UNKNOWN), MoodVote("B", UNKNOWN), MoodVote("C", UNKNOWN)]
        result = judge_votes(votes)
        assert result.winning_label == UNKNOWN
        assert result.vote_counts == {}
        assert result.degraded

    def test_tie_goes_to_label_reached_first(self):
        votes = [MoodVote("A", "anger"), MoodVote("B", "fear")]
        assert judge_votes(votes).winning_label == "anger"

    def test_tie_skips_unknown_first_vote(self):
        votes = [MoodVote("A", UNKNOWN), MoodVote("B", "joy"), MoodVote("C", "anger")]
        assert judge_votes(votes).winning_label == "joy"

    def test_later_label_needs_strictly_more_votes(self):
        votes = [
            MoodVote("A", "calm"),
            MoodVote("B", "joy"),
            MoodVote("C", "joy"),
            MoodVote("D", "calm"),
        ]
        assert judge_votes(votes).winning_label == "calm"

    def test_no_votes(self):
        result = judge_votes([])
        assert result.winning_label == UNKNOWN
        assert result.participant_count == 0


class TestMoodArbiter:
    def test_majority_joy(self):
        result = arbitrate(
            FakeClassifier("A", "joy"),
            FakeClassifier("B", "joy"),
            FakeClassifier("C", "sadness"),
        )
        assert result.winning_label == "joy"
        assert [v.provider_id for v in result.votes] == ["A", "B", "C"]

    def test_every_provider_failing_is_degraded_not_an_error(self):
        result = arbitrate(
            FakeClassifier("A", error=ProviderUnavailable("A", "HTTP 503")),
            FakeClassifier("B", error=RuntimeError("boom")),
            FakeClassifier("C", label="   "),
        )
        assert result.winning_label == UNKNOWN
        assert result.degraded
        assert all(v.label == UNKNOWN for v in result.votes)

    def test_failed_priority_provider_is_outvoted(self):
        result = arbitrate(
            FakeClassifier("A", error=ProviderUnavailable("A", "down")),
            FakeClassifier("B", "sadness"),
            FakeClassifier("C", "sadness"),
        )
        assert result.winning_label == "sadness"

    def test_tie_break_ignores_completion_order(self):
        result = arbitrate(
            FakeClassifier("A", "sadness", delay=0.05),
            FakeClassifier("B", "joy"),
        )
        assert result.winning_label == "sadness"

    def test_hung_classifier_times_out_to_unknown(self):
        result = arbitrate(
            FakeClassifier("A", "joy", delay=5, timeout=0.01),
            FakeClassifier("B", "fear"),
        )
        assert result.votes[0].label == UNKNOWN
        assert result.winning_label == "fear"

    def test_zero_timeout_still_bounds_the_classifier(self):
        result = arbitrate(
            FakeClassifier("A", "joy", delay=5, timeout=0),
            FakeClassifier("B", "fear"),
        )
        assert result.votes[0].label == UNKNOWN
        assert result.winning_label == "fear"

    def test_non_text_label_is_unknown(self):
        classifier = FakeClassifier("A", 5)
        assert asyncio.run(classifier.classify("hi")) == UNKNOWN

    def test_classifiers_run_concurrently(self):
        barrier = Barrier(3)
        classifiers = [FakeClassifier(p, "joy", barrier=barrier) for p in "ABC"]
        result = arbitrate(*classifiers)
        assert result.winning_label == "joy"
        assert all(c.calls == 1 for c in classifiers)
