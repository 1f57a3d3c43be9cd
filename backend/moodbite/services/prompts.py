"""
Prompt builders for the mood classifiers and the suggestion generators.

Both functions are pure: the same inputs always produce the same prompt.
"""

SUGGESTION_JSON_SCHEMA = """\
Respond with a JSON object with these exact keys: "predictedMood", "suggestedFood", "reason", "confidenceScore", "otherSuggestions".
- "predictedMood": The final mood determination: "{mood}".
- "suggestedFood": A string for the single BEST food suggestion.
- "reason": A detailed string explaining why the main suggestion is a good choice.
- "confidenceScore": An INTEGER between 80 and 95.
- "otherSuggestions": A JSON array of 2-3 other creative food ideas (strings).
Return ONLY the JSON, no markdown fences or extra text."""


def build_mood_prompt(text: str) -> str:
    return (
        "Analyze the following text and determine the user's primary, nuanced mood "
        f'in one or two words. Text: "{text}"'
    )


def build_suggestion_prompt(mood: str, ingredients: list[str] | None = None) -> str:
    """Build the generation request for the arbitrated mood.

    With a non-empty ingredient list the generator is told to cook only with
    those ingredients; otherwise no ingredient constraint is added.
    """
    lines = [
        "You are MoodBite, an expert Indian chef.",
        f'A user is feeling: "{mood}".',
    ]

    cleaned = [i.strip() for i in ingredients or [] if i and i.strip()]
    if cleaned:
        lines.append(f"They have these ingredients available: [{', '.join(cleaned)}].")
        lines.append(
            "Every suggestion must use ONLY the listed ingredients "
            "(plus water, salt and common spices)."
        )

    lines.append("")
    lines.append(SUGGESTION_JSON_SCHEMA.format(mood=mood))
    lines.append("")
    lines.append(
        "IMPORTANT: Your suggestions must be realistic and varied. Include comforting, "
        "indulgent, or sweet foods and drinks where appropriate."
    )
    return "\n".join(lines)
