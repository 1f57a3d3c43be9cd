"""
MoodBite: the mood-to-food pipeline.

    text, ingredients
      -> MoodArbiter (all classifiers concurrently, majority vote)
      -> build_suggestion_prompt
      -> SuggestionOrchestrator (fallback or competition)
      -> assemble
      -> FinalSuggestion

Adapters and transports are built once from Settings by ``build_mood_bite`` and
injected; every request gets its own PipelineRun and nothing else is shared.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from moodbite.config import Settings, get_settings
from moodbite.schemas.suggestion import FinalSuggestion, error_suggestion
from moodbite.services.assembler import assemble
from moodbite.services.classifiers import (
    AnthropicClassifier,
    ClassifierAdapter,
    GeminiClassifier,
    HuggingFaceClassifier,
    OpenRouterClassifier,
)
from moodbite.services.clients import (
    AnthropicMessages,
    GeminiModels,
    HuggingFaceInference,
    OpenRouterChat,
)
from moodbite.services.errors import AllSuggestionProvidersFailed, EmptyInputError
from moodbite.services.mood_arbiter import ArbitrationResult, MoodArbiter
from moodbite.services.orchestrator import SuggestionOrchestrator, SuggestionStrategy
from moodbite.services.prompts import build_suggestion_prompt
from moodbite.services.suggesters import (
    AnthropicSuggester,
    GeminiSuggester,
    OpenRouterSuggester,
    SuggestionAdapter,
    SuggestionCandidate,
)

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    INIT = "init"
    CLASSIFYING = "classifying"
    MOOD_ARBITRATED = "mood_arbitrated"
    GENERATING = "generating"
    SUGGESTION_ARBITRATED = "suggestion_arbitrated"
    ASSEMBLED = "assembled"
    FAILED = "failed"


# Classification never fails: a degraded mood still moves forward.
TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.INIT: {PipelineState.CLASSIFYING, PipelineState.FAILED},
    PipelineState.CLASSIFYING: {PipelineState.MOOD_ARBITRATED},
    PipelineState.MOOD_ARBITRATED: {PipelineState.GENERATING},
    PipelineState.GENERATING: {PipelineState.SUGGESTION_ARBITRATED, PipelineState.FAILED},
    PipelineState.SUGGESTION_ARBITRATED: {PipelineState.ASSEMBLED},
}


@dataclass
class PipelineRun:
    state: PipelineState = PipelineState.INIT
    arbitration: ArbitrationResult | None = None
    candidate: SuggestionCandidate | None = None
    suggestion: FinalSuggestion | None = None
    error: str | None = None
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])

    def advance(self, new_state: PipelineState) -> None:
        if new_state not in TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Illegal pipeline transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    @property
    def failed(self) -> bool:
        return self.state is PipelineState.FAILED


class MoodBite:
    def __init__(
        self,
        arbiter: MoodArbiter,
        orchestrator: SuggestionOrchestrator,
        request_timeout: float | None = None,
    ):
        self.arbiter = arbiter
        self.orchestrator = orchestrator
        self.request_timeout = request_timeout

    async def run(self, text: str | None, ingredients: list[str] | None = None) -> PipelineRun:
        """Run the whole pipeline for one request.

        Raises EmptyInputError for blank text. Every other outcome, including
        total provider failure, is reported through the returned PipelineRun.
        """
        run = PipelineRun()
        if not text or not text.strip():
            run.advance(PipelineState.FAILED)
            raise EmptyInputError("User input is required.")

        loop = asyncio.get_running_loop()
        started = loop.time()

        run.advance(PipelineState.CLASSIFYING)
        run.arbitration = await self.arbiter.arbitrate(text)
        run.advance(PipelineState.MOOD_ARBITRATED)

        prompt = build_suggestion_prompt(run.arbitration.winning_label, ingredients)

        run.advance(PipelineState.GENERATING)
        try:
            if self.request_timeout is not None:
                remaining = max(self.request_timeout - (loop.time() - started), 0.0)
                run.candidate = await asyncio.wait_for(self.orchestrator.select(prompt), remaining)
            else:
                run.candidate = await self.orchestrator.select(prompt)
        except AllSuggestionProvidersFailed as e:
            logger.error(f"Suggestion generation failed: {e}")
            return self._fail(run, str(e))
        except asyncio.TimeoutError:
            logger.error(f"Request deadline of {self.request_timeout}s expired while generating")
            return self._fail(run, "request deadline expired")
        run.advance(PipelineState.SUGGESTION_ARBITRATED)

        run.suggestion = assemble(run.arbitration, run.candidate)
        run.advance(PipelineState.ASSEMBLED)
        logger.info(f"Suggestion {run.suggestion.suggested_food!r} from {run.suggestion.source}")
        return run

    async def produce_suggestion(self, text: str | None, ingredients: list[str] | None = None) -> FinalSuggestion:
        run = await self.run(text, ingredients)
        return run.suggestion

    def _fail(self, run: PipelineRun, error: str) -> PipelineRun:
        run.advance(PipelineState.FAILED)
        run.error = error
        run.suggestion = error_suggestion()
        return run


# ── Construction from settings ───────────────────────────────────

@dataclass
class ProviderTransports:
    huggingface: HuggingFaceInference
    openrouter: OpenRouterChat
    gemini: GeminiModels
    anthropic: AnthropicMessages

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderTransports":
        return cls(
            huggingface=HuggingFaceInference(
                settings.HUGGING_FACE_API_TOKEN, settings.HF_INFERENCE_URL, settings.HF_EMOTION_MODEL
            ),
            openrouter=OpenRouterChat(
                settings.OPENROUTER_API_KEY, settings.OPENROUTER_URL, settings.OPENROUTER_MODEL
            ),
            gemini=GeminiModels(settings.GEMINI_API_KEY),
            anthropic=AnthropicMessages(settings.ANTHROPIC_API_KEY, settings.CLAUDE_MODEL),
        )


def build_classifiers(settings: Settings, transports: ProviderTransports) -> list[ClassifierAdapter]:
    timeout = settings.CLASSIFIER_TIMEOUT_SECONDS
    factories = {
        "roberta": lambda: HuggingFaceClassifier(transports.huggingface, timeout=timeout),
        "gemini": lambda: GeminiClassifier(transports.gemini, settings.GEMINI_MOOD_MODEL, timeout=timeout),
        "openrouter": lambda: OpenRouterClassifier(transports.openrouter, timeout=timeout),
        "anthropic": lambda: AnthropicClassifier(transports.anthropic, timeout=timeout),
    }
    return [_make(factories, name, "classifier") for name in settings.split_names(settings.CLASSIFIER_PROVIDERS)]


def build_suggesters(settings: Settings, transports: ProviderTransports) -> list[SuggestionAdapter]:
    timeout = settings.SUGGESTION_TIMEOUT_SECONDS
    factories = {
        "gemini": lambda: GeminiSuggester(transports.gemini, settings.GEMINI_SUGGESTION_MODEL, timeout=timeout),
        "openrouter": lambda: OpenRouterSuggester(transports.openrouter, timeout=timeout),
        "anthropic": lambda: AnthropicSuggester(transports.anthropic, timeout=timeout),
    }
    return [_make(factories, name, "suggestion") for name in settings.split_names(settings.SUGGESTION_PROVIDERS)]


def _make(factories: dict, name: str, kind: str):
    if name not in factories:
        raise ValueError(f"Unknown {kind} provider {name!r}; expected one of {', '.join(factories)}")
    return factories[name]()


def build_mood_bite(settings: Settings, transports: ProviderTransports | None = None) -> MoodBite:
    transports = transports or ProviderTransports.from_settings(settings)
    arbiter = MoodArbiter(build_classifiers(settings, transports))
    orchestrator = SuggestionOrchestrator(
        build_suggesters(settings, transports),
        SuggestionStrategy(settings.SUGGESTION_STRATEGY.strip().lower()),
    )
    return MoodBite(arbiter, orchestrator, request_timeout=settings.REQUEST_TIMEOUT_SECONDS)


@lru_cache
def get_transports() -> ProviderTransports:
    return ProviderTransports.from_settings(get_settings())


@lru_cache
def get_mood_bite() -> MoodBite:
    return build_mood_bite(get_settings(), get_transports())
