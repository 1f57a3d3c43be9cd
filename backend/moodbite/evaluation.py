"""
Mood classification evaluation against a running MoodBite API.

Posts a small labelled sentence set to /api/suggest-food and compares the
returned predictedMood with the expected emotion, both exactly ("strict") and
at the level of coarse emotion groups ("nuanced").

    python -m moodbite.evaluation --base-url http://localhost:8000
"""

import argparse
import asyncio
import logging
from dataclasses import dataclass, field

import httpx
from sklearn.metrics import classification_report, precision_recall_fscore_support

logger = logging.getLogger(__name__)

TEST_DATA = [
    ("I am so happy, my project is finally working!", "joy"),
    ("This is amazing, thank you so much for your help.", "admiration"),
    ("I feel very down and lonely today.", "sadness"),
    ("My computer crashed and I lost all my work, I'm so angry.", "anger"),
    ("I'm not sure what to do, I'm really worried about the deadline.", "fear"),
    ("Wow, I was not expecting that at all!", "surprise"),
    ("I'm so grateful for my friends and family.", "gratitude"),
    ("I'm so frustrated with this bug, it won't go away.", "anger"),
    ("It was a very calm and peaceful evening.", "neutral"),
    ("I just feel so excited for the trip next week!", "excitement"),
    ("I love this new song, it's beautiful.", "love"),
    ("I'm disappointed with the result.", "disappointment"),
]

EMOTION_GROUPS = {
    "joy": ["joy", "excitement", "love", "admiration", "gratitude"],
    "sadness": ["sadness", "disappointment", "grief"],
    "anger": ["anger", "annoyance", "frustration"],
    "fear": ["fear", "nervousness", "remorse"],
    "surprise": ["surprise", "curiosity"],
    "neutral": ["neutral", "optimism"],
}

GROUP_LOOKUP = {emotion: group for group, emotions in EMOTION_GROUPS.items() for emotion in emotions}


@dataclass
class LabelReport:
    precision: float
    recall: float
    f1: float
    support: int


@dataclass
class EvaluationReport:
    strict_accuracy: float
    nuanced_accuracy: float
    labels: dict[str, LabelReport] = field(default_factory=dict)
    table: str = ""


def nuanced_match(expected: str, predicted: str) -> bool:
    """Exact match, or both labels fall in the same emotion group."""
    if expected == predicted:
        return True
    group = GROUP_LOOKUP.get(expected)
    return group is not None and group == GROUP_LOOKUP.get(predicted)


def calculate_metrics(y_true: list[str], y_pred: list[str]) -> EvaluationReport:
    if not y_true:
        raise ValueError("No predictions to evaluate")
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    pairs = list(zip(y_true, y_pred))
    strict = sum(1 for t, p in pairs if t == p)
    nuanced = sum(1 for t, p in pairs if nuanced_match(t, p))

    # Per-label scores only for the expected emotions; stray predictions such
    # as "unknown" count against precision/recall without getting a row.
    label_names = list(dict.fromkeys(y_true))
    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=label_names, zero_division=0
    )
    labels = {
        name: LabelReport(float(p), float(r), float(f), int(s))
        for name, p, r, f, s in zip(label_names, precision, recall, f1, support)
    }

    return EvaluationReport(
        strict_accuracy=strict / len(pairs) * 100,
        nuanced_accuracy=nuanced / len(pairs) * 100,
        labels=labels,
        table=classification_report(y_true, y_pred, labels=label_names, zero_division=0),
    )


async def get_prediction(client: httpx.AsyncClient, sentence: str) -> str | None:
    try:
        response = await client.post("/api/suggest-food", json={"text": sentence})
    except httpx.HTTPError as e:
        logger.error(f"Prediction request failed for {sentence[:30]!r}: {e!r}")
        return None
    if not response.is_success:
        return None
    mood = response.json().get("predictedMood")
    return mood.lower() if mood else None


async def run_evaluation(base_url: str, client: httpx.AsyncClient | None = None) -> EvaluationReport | None:
    """Evaluate every sentence concurrently; failed predictions are skipped."""
    owned = client is None
    client = client or httpx.AsyncClient(base_url=base_url, timeout=120.0)
    try:
        predictions = await asyncio.gather(*(get_prediction(client, s) for s, _ in TEST_DATA))
    finally:
        if owned:
            await client.aclose()

    y_true, y_pred = [], []
    for (sentence, expected), predicted in zip(TEST_DATA, predictions):
        if predicted is None:
            continue
        y_true.append(expected)
        y_pred.append(predicted)
        logger.info(f"Tested {sentence[:30]!r}... -> {predicted} (actual: {expected})")

    if not y_true:
        logger.warning("Could not get any successful predictions to generate a report")
        return None
    return calculate_metrics(y_true, y_pred)


def format_report(report: EvaluationReport) -> str:
    return "\n".join([
        f"Strict Accuracy (exact match): {report.strict_accuracy:.2f}%",
        f"Nuanced Accuracy (emotion group match): {report.nuanced_accuracy:.2f}%",
        "",
        report.table,
    ])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate MoodBite mood classification")
    parser.add_argument("--base-url", default="http://localhost:8000", help="MoodBite API base URL")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    report = asyncio.run(run_evaluation(args.base_url))
    if report is None:
        return 1
    print(format_report(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
