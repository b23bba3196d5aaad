import unittest

from foodlens_backend.models import NO_FOOD, FoodItems, ImageBlob, NutritionItem
from foodlens_backend.services.errors import (
    ConfigurationMissingError,
    ModelFailureError,
)
from foodlens_backend.services.hosting import ImageHostClient, ImageHostSettings
from foodlens_backend.services.llm import VisionLLMSettings, VisionModelClient
from foodlens_backend.services.pipeline import (
    ANALYZING,
    COMPLETE,
    UPLOADING,
    AnalysisPipeline,
)

from tests.support import FakeOpenAI, completion, status_error

BLOB = ImageBlob(data=b"jpeg-bytes", mime_type="image/jpeg")
APPLE_JSON = (
    '{"has_food":true,"items":[{"item_name":"Apple","total_calories":95,'
    '"total_protein":0.5,"total_carbs":25,"total_fats":0.3}]}'
)


class _NoNetworkSession:
    def post(self, *args, **kwargs):  # pragma: no cover - fails the test
        raise AssertionError("image host must not be called without a key")


def build_pipeline(fake, *, api_key="key", progress=None):
    host = ImageHostClient(ImageHostSettings(api_key=None), session=_NoNetworkSession())
    vision = VisionModelClient(
        VisionLLMSettings(api_key=api_key, models=("primary", "fallback")),
        client=fake,
    )
    return AnalysisPipeline(host_client=host, vision_client=vision, progress=progress)


class AnalysisPipelineTests(unittest.TestCase):
    def test_successful_analysis_reports_three_milestones(self):
        milestones = []
        fake = FakeOpenAI({"primary": completion(APPLE_JSON)})
        outcome = build_pipeline(fake, progress=milestones.append).analyze(BLOB)

        self.assertFalse(outcome.failed)
        self.assertEqual(
            outcome.result,
            FoodItems(items=(NutritionItem("Apple", 95, 0.5, 25, 0.3),)),
        )
        self.assertEqual(milestones, [UPLOADING, ANALYZING, COMPLETE])
        self.assertEqual(
            [m.percent for m in milestones], [33, 66, 100]
        )

    def test_inline_image_is_sent_to_model(self):
        fake = FakeOpenAI({"primary": completion(APPLE_JSON)})
        build_pipeline(fake).analyze(BLOB)

        image_part = fake.requests[0]["messages"][0]["content"][1]
        self.assertEqual(image_part["image_url"]["url"], BLOB.to_data_url())

    def test_all_models_failing_resolves_to_no_food(self):
        fake = FakeOpenAI(
            {
                "primary": status_error(500, "boom"),
                "fallback": status_error(500, "boom again"),
            }
        )
        outcome = build_pipeline(fake).analyze(BLOB)

        self.assertIs(outcome.result, NO_FOOD)
        self.assertIsInstance(outcome.error, ModelFailureError)
        self.assertEqual(len(fake.requests), 2)

    def test_run_raises_model_failure(self):
        fake = FakeOpenAI({"primary": status_error(500, "x"), "fallback": status_error(502, "y")})
        with self.assertRaises(ModelFailureError):
            build_pipeline(fake).run(BLOB)

    def test_missing_model_key_fails_before_any_stage(self):
        milestones = []
        fake = FakeOpenAI()
        outcome = build_pipeline(
            fake, api_key=None, progress=milestones.append
        ).analyze(BLOB)

        self.assertIs(outcome.result, NO_FOOD)
        self.assertIsInstance(outcome.error, ConfigurationMissingError)
        self.assertEqual(milestones, [])
        self.assertEqual(fake.requests, [])

    def test_unparseable_model_text_is_no_food_without_error(self):
        fake = FakeOpenAI({"primary": completion("I see a table and a chair.")})
        outcome = build_pipeline(fake).analyze(BLOB)

        self.assertIs(outcome.result, NO_FOOD)
        self.assertIsNone(outcome.error)

    def test_failing_progress_observer_does_not_break_analysis(self):
        def explode(_milestone):
            raise RuntimeError("observer broke")

        fake = FakeOpenAI({"primary": completion(APPLE_JSON)})
        outcome = build_pipeline(fake, progress=explode).analyze(BLOB)

        self.assertIsInstance(outcome.result, FoodItems)


if __name__ == "__main__":
    unittest.main()
