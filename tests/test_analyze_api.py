import io
import unittest
from types import SimpleNamespace

from foodlens_backend import create_app
from foodlens_backend.services.llm import VisionLLMSettings, VisionModelClient

from tests.support import FakeOpenAI, completion, status_error

TWO_ITEMS_JSON = (
    'Here you go: {"has_food": true, "items": ['
    '{"item_name": "Rice", "total_calories": 200, "total_protein": 4,'
    ' "total_carbs": 45, "total_fats": 0.5},'
    '{"item_name": "", "total_calories": "150", "total_protein": "20",'
    ' "total_carbs": "x", "total_fats": 7}]}'
)


class AnalyzeApiTests(unittest.TestCase):
    def setUp(self):
        self.app = create_app(environ={"FOODLENS_VISION_API_KEY": "key"})
        self.fake = FakeOpenAI()
        self.app.extensions["vision_model_client"] = VisionModelClient(
            VisionLLMSettings(api_key="key", models=("primary", "fallback")),
            client=self.fake,
        )
        self.client = self.app.test_client()

    def _post_image(self, data=b"jpeg-bytes", content_type="image/jpeg"):
        return self.client.post(
            "/api/analyze",
            data={"image": (io.BytesIO(data), "meal.jpg", content_type)},
            content_type="multipart/form-data",
        )

    def test_multipart_upload_returns_items_and_totals(self):
        self.fake.outcomes["primary"] = completion(TWO_ITEMS_JSON)
        response = self._post_image()

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertTrue(body["hasFood"])
        self.assertEqual(
            body["items"],
            [
                {
                    "name": "Rice",
                    "displayName": "Rice",
                    "calories": 200.0,
                    "protein": 4.0,
                    "carbs": 45.0,
                    "fats": 0.5,
                },
                {
                    "name": "",
                    "displayName": "Food Item",
                    "calories": 150.0,
                    "protein": 20.0,
                    "carbs": 0.0,
                    "fats": 7.0,
                },
            ],
        )
        self.assertEqual(
            body["totals"],
            {"calories": 350.0, "protein": 24.0, "carbs": 45.0, "fats": 7.5},
        )

    def test_data_url_payload_is_accepted(self):
        self.fake.outcomes["primary"] = completion('{"has_food":false,"items":[]}')
        response = self.client.post(
            "/api/analyze", json={"image": "data:image/png;base64,aGVsbG8="}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json(), {"hasFood": False, "items": [], "totals": None}
        )
        image_part = self.fake.requests[0]["messages"][0]["content"][1]
        self.assertEqual(
            image_part["image_url"]["url"], "data:image/png;base64,aGVsbG8="
        )

    def test_model_failure_is_reported_as_no_food(self):
        self.fake.outcomes["primary"] = status_error(500, "internal error")
        self.fake.outcomes["fallback"] = status_error(500, "internal error")
        response = self._post_image()

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body, {"hasFood": False, "items": [], "totals": None})
        self.assertNotIn("error", body)

    def test_invalid_input_is_rejected(self):
        cases = {
            "missing": lambda: self.client.post("/api/analyze", json={}),
            "empty_file": lambda: self._post_image(data=b""),
            "not_image": lambda: self._post_image(content_type="text/plain"),
            "bad_data_url": lambda: self.client.post(
                "/api/analyze", json={"image": "not-a-data-url"}
            ),
        }
        for name, send in cases.items():
            with self.subTest(case=name):
                response = send()
                self.assertEqual(response.status_code, 400)
                self.assertIn("error", response.get_json())
        self.assertEqual(self.fake.requests, [])


class AppWithoutKeysTests(unittest.TestCase):
    def setUp(self):
        self.client = create_app(environ={}).test_client()

    def test_healthchecks(self):
        for path in ("/healthz", "/api/healthz"):
            with self.subTest(path=path):
                response = self.client.get(path)
                self.assertEqual(response.get_json(), {"status": "ok"})

    def test_analysis_without_model_key_reports_no_food(self):
        response = self.client.post(
            "/api/analyze", json={"image": "data:image/jpeg;base64,aGVsbG8="}
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.get_json()["hasFood"])

    def test_model_listing_without_key_is_unavailable(self):
        response = self.client.get("/api/models")
        self.assertEqual(response.status_code, 503)


class VisionModelsApiTests(unittest.TestCase):
    def setUp(self):
        self.app = create_app(environ={"GROQ_API_KEY": "key"})
        self.client = self.app.test_client()

    def _install(self, fake):
        self.app.extensions["vision_model_client"] = VisionModelClient(
            VisionLLMSettings(api_key="key", models=("primary",)), client=fake
        )

    def test_lists_models(self):
        self._install(FakeOpenAI(model_ids=["llava-v1.5", "whisper", "primary"]))
        response = self.client.get("/api/models")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json(),
            {"models": ["llava-v1.5", "primary"], "candidates": ["primary"]},
        )

    def test_listing_failure_is_bad_gateway(self):
        self._install(FakeOpenAI(list_error=status_error(500, "down")))
        response = self.client.get("/api/models")
        self.assertEqual(response.status_code, 502)

    def test_malformed_listing_is_bad_gateway(self):
        fake = FakeOpenAI()
        fake.models = SimpleNamespace(list=lambda: [object()])
        self._install(fake)
        response = self.client.get("/api/models")
        self.assertEqual(response.status_code, 502)


if __name__ == "__main__":
    unittest.main()
