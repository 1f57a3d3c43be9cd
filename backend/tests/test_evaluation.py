import asyncio
import json

import httpx
import pytest

from moodbite.evaluation import TEST_DATA, calculate_metrics, format_report, nuanced_match, run_evaluation


class TestCalculateMetrics:
    def test_strict_and_nuanced_accuracy(self):
        y_true = ["joy", "sadness", "anger", "fear"]
        y_pred = ["joy", "disappointment", "anger", "surprise"]
        report = calculate_metrics(y_true, y_pred)
        assert report.strict_accuracy == pytest.approx(50.0)
        assert report.nuanced_accuracy == pytest.approx(75.0)

    def test_per_label_scores(self):
        y_true = ["joy", "joy", "sadness"]
        y_pred = ["joy", "sadness", "sadness"]
        report = calculate_metrics(y_true, y_pred)

        joy = report.labels["joy"]
        assert (joy.precision, joy.recall, joy.support) == (1.0, 0.5, 2)
        assert joy.f1 == pytest.approx(2 / 3)

        sadness = report.labels["sadness"]
        assert (sadness.precision, sadness.recall, sadness.support) == (0.5, 1.0, 1)

    def test_unknown_prediction_matches_no_group(self):
        report = calculate_metrics(["neutral"], ["unknown"])
        assert report.nuanced_accuracy == 0.0
        assert report.labels["neutral"].f1 == 0.0

    def test_table_rows_cover_expected_labels_only(self):
        report = calculate_metrics(["joy", "anger"], ["joy", "unknown"])
        assert "joy" in report.table
        assert "anger" in report.table
        assert "unknown" not in report.table
        assert set(report.labels) == {"joy", "anger"}
        assert isinstance(report.labels["anger"].support, int)

    @pytest.mark.parametrize(
        "expected, predicted, matches",
        [
            ("joy", "joy", True),
            ("joy", "gratitude", True),
            ("sadness", "grief", True),
            ("anger", "fear", False),
            ("neutral", "unknown", False),
            ("confusion", "confusion", True),
        ],
    )
    def test_nuanced_match(self, expected, predicted, matches):
        assert nuanced_match(expected, predicted) is matches

    def test_empty(self):
        with pytest.raises(ValueError):
            calculate_metrics([], [])


class TestRunEvaluation:
    def test_skips_failed_predictions(self):
        expected = dict(TEST_DATA)

        def handler(request):
            sentence = json.loads(request.content)["text"]
            if "deadline" in sentence:
                return httpx.Response(500, json={"predictedMood": "Error"})
            return httpx.Response(200, json={"predictedMood": expected[sentence].upper()})

        client = httpx.AsyncClient(base_url="http://moodbite.test", transport=httpx.MockTransport(handler))
        report = asyncio.run(run_evaluation("http://moodbite.test", client=client))

        assert report.strict_accuracy == 100.0
        assert "fear" not in report.labels
        assert "Strict Accuracy (exact match): 100.00%" in format_report(report)

    def test_nothing_succeeded(self):
        client = httpx.AsyncClient(
            base_url="http://moodbite.test",
            transport=httpx.MockTransport(lambda r: httpx.Response(503)),
        )
        assert asyncio.run(run_evaluation("http://moodbite.test", client=client)) is None
