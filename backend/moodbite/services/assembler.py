from moodbite.schemas.suggestion import FinalSuggestion
from moodbite.services.mood_arbiter import ArbitrationResult
from moodbite.services.suggesters import SuggestionCandidate


def assemble(arbitration: ArbitrationResult, candidate: SuggestionCandidate) -> FinalSuggestion:
    """Join the arbitrated mood with the winning suggestion.

    Providers are not trusted to echo the mood back, so the candidate's own
    predicted mood is always replaced by the arbitrated one.
    """
    return FinalSuggestion(
        predicted_mood=arbitration.winning_label,
        suggested_food=candidate.suggested_food,
        reason=candidate.reason,
        confidence_score=candidate.confidence_score,
        other_suggestions=list(candidate.other_suggestions or []),
        source=candidate.provider_id,
    )
