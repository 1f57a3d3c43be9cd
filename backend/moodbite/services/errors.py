"""
Error and result types shared by the provider adapters and the pipeline.

Provider errors are raised inside an adapter and converted at its boundary:
classifiers turn them into the UNKNOWN label, suggesters into a Failure value.
Only AllSuggestionProvidersFailed leaves the orchestrator.
"""

from dataclasses import dataclass


class ProviderError(Exception):
    """Base class for anything that goes wrong talking to one provider."""

    def __init__(self, provider_id: str, message: str):
        super().__init__(f"{provider_id}: {message}")
        self.provider_id = provider_id
        self.message = message


class ProviderUnavailable(ProviderError):
    """Network error, timeout, non-success status or missing credentials."""


class MalformedResponse(ProviderError):
    """The provider answered, but the payload could not be parsed or validated."""


@dataclass(frozen=True)
class Failure:
    provider_id: str
    error: ProviderError

    @property
    def reason(self) -> str:
        return self.error.message


class AllSuggestionProvidersFailed(Exception):
    def __init__(self, failures: list[Failure] | None = None):
        self.failures = list(failures or [])
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.failures:
            return "No suggestion providers are configured."
        details = "; ".join(f"{f.provider_id}: {f.reason}" for f in self.failures)
        return f"All suggestion providers failed ({details})"


class EmptyInputError(ValueError):
    """Raised when the mood text is missing or blank."""
