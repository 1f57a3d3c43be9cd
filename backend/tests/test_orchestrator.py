import asyncio

import pytest
from fakes import Barrier, FakeSuggester, candidate_json

from moodbite.services.errors import AllSuggestionProvidersFailed, MalformedResponse, ProviderUnavailable
from moodbite.services.orchestrator import SuggestionOrchestrator, SuggestionStrategy


def select(adapters, strategy):
    return asyncio.run(SuggestionOrchestrator(adapters, strategy).select("prompt"))


class TestSequentialFallback:
    def test_primary_success_short_circuits(self):
        a = FakeSuggester("A", raw=candidate_json(food="Kheer"))
        b = FakeSuggester("B", raw=candidate_json(food="Poha"))
        winner = select([a, b], SuggestionStrategy.FALLBACK)
        assert winner.provider_id == "A"
        assert winner.suggested_food == "Kheer"
        assert b.calls == 0

    def test_falls_back_after_failure(self):
        a = FakeSuggester("A", error=ProviderUnavailable("A", "HTTP 429"))
        b = FakeSuggester("B", raw=candidate_json(food="Poha"))
        c = FakeSuggester("C", raw=candidate_json(food="Upma"))
        winner = select([a, b, c], SuggestionStrategy.FALLBACK)
        assert winner.provider_id == "B"
        assert (a.calls, b.calls, c.calls) == (1, 1, 0)

    def test_malformed_payload_falls_back(self):
        a = FakeSuggester("A", raw="Here is a nice dal for you")
        b = FakeSuggester("B", raw=candidate_json())
        assert select([a, b], SuggestionStrategy.FALLBACK).provider_id == "B"

    def test_all_failed(self):
        a = FakeSuggester("A", error=ProviderUnavailable("A", "down"))
        b = FakeSuggester("B", raw="{}")
        with pytest.raises(AllSuggestionProvidersFailed) as exc_info:
            select([a, b], SuggestionStrategy.FALLBACK)
        failures = exc_info.value.failures
        assert [f.provider_id for f in failures] == ["A", "B"]
        assert isinstance(failures[1].error, MalformedResponse)


class TestParallelCompetition:
    def test_highest_confidence_wins(self):
        a = FakeSuggester("A", raw=candidate_json(food="Kheer", confidence=82))
        b = FakeSuggester("B", raw=candidate_json(food="Poha", confidence=90))
        winner = select([a, b], SuggestionStrategy.COMPETITION)
        assert winner.provider_id == "B"
        assert winner.confidence_score == 90

    def test_fractional_and_integer_scores_compete_on_one_scale(self):
        a = FakeSuggester("A", raw=candidate_json(confidence=0.93))
        b = FakeSuggester("B", raw=candidate_json(confidence=90))
        assert select([a, b], SuggestionStrategy.COMPETITION).provider_id == "A"

    def test_tie_goes_to_priority_regardless_of_timing(self):
        a = FakeSuggester("A", raw=candidate_json(confidence=90), delay=0.05)
        b = FakeSuggester("B", raw=candidate_json(confidence=90))
        assert select([a, b], SuggestionStrategy.COMPETITION).provider_id == "A"

    def test_malformed_provider_does_not_affect_others(self):
        a = FakeSuggester("A", raw="```json\n{broken")
        b = FakeSuggester("B", raw=candidate_json(confidence=85))
        c = FakeSuggester("C", error=RuntimeError("socket closed"))
        winner = select([a, b, c], SuggestionStrategy.COMPETITION)
        assert winner.provider_id == "B"
        assert (a.calls, b.calls, c.calls) == (1, 1, 1)

    def test_all_failed(self):
        adapters = [FakeSuggester(p, error=ProviderUnavailable(p, "down")) for p in "AB"]
        with pytest.raises(AllSuggestionProvidersFailed) as exc_info:
            select(adapters, SuggestionStrategy.COMPETITION)
        assert len(exc_info.value.failures) == 2

    def test_adapters_run_concurrently(self):
        barrier = Barrier(2)
        a = FakeSuggester("A", raw=candidate_json(confidence=80), barrier=barrier)
        b = FakeSuggester("B", raw=candidate_json(confidence=81), barrier=barrier)
        assert select([a, b], SuggestionStrategy.COMPETITION).provider_id == "B"


class TestOrchestratorConfiguration:
    def test_strategy_from_string(self):
        assert SuggestionOrchestrator([], "competition").strategy is SuggestionStrategy.COMPETITION

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            SuggestionOrchestrator([], "round-robin")

    @pytest.mark.parametrize("strategy", list(SuggestionStrategy))
    def test_no_adapters(self, strategy):
        with pytest.raises(AllSuggestionProvidersFailed):
            select([], strategy)
