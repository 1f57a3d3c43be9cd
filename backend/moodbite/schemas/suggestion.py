from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class SuggestFoodRequest(BaseModel):
    text: str | None = None
    ingredients: list[str] | None = None


class FinalSuggestion(BaseModel):
    predicted_mood: str
    suggested_food: str
    reason: str
    confidence_score: int
    other_suggestions: list[str] = []
    source: str | None = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    def to_payload(self) -> dict:
        """camelCase JSON body; ``source`` is omitted when there is none."""
        return self.model_dump(by_alias=True, exclude_none=True)


FAILURE_REASON = "Sorry, the AI assistants failed to respond. Please try again in a moment."


def error_suggestion(reason: str = FAILURE_REASON) -> FinalSuggestion:
    return FinalSuggestion(
        predicted_mood="Error",
        suggested_food="Request Failed",
        reason=reason,
        confidence_score=0,
        other_suggestions=[],
    )


# ── Collaborator endpoints ───────────────────────────────────────

class IngredientsResponse(BaseModel):
    ingredients: list[str]


class FoodImageResponse(BaseModel):
    image_url: str

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
