"""Tests for the HTTP action endpoint."""
import json

import pytest
from fastapi.testclient import TestClient

from travel_planner.api.routes import relay_chunks
from travel_planner.main import create_app

from conftest import FakeLLM, SAMPLE_PLAN, make_dispatcher, saved_plan_payload


def make_client(settings, llm: FakeLLM = None) -> TestClient:
    return TestClient(create_app(settings, make_dispatcher(settings, llm)))


class TestMethods:
    """Method handling and CORS."""

    def test_options(self, settings):
        """OPTIONS always answers 200 with permissive CORS headers."""
        response = make_client(settings).options("/api/travel")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.parametrize("requested_method", ["POST", "GET"])
    def test_browser_preflight(self, settings, requested_method):
        """A browser preflight asking for extra headers or methods still gets a 200."""
        response = make_client(settings).options(
            "/api/travel",
            headers={
                "Origin": "https://planner.example.test",
                "Access-Control-Request-Method": requested_method,
                "Access-Control-Request-Headers": "content-type, authorization",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_other_methods(self, settings, method):
        """Anything but POST and OPTIONS is a 405."""
        response = getattr(make_client(settings), method)("/api/travel")

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}

    def test_malformed_body(self, settings):
        """A body without an action is a 400."""
        response = make_client(settings).post("/api/travel", json={"payload": {}})

        assert response.status_code == 400
        assert "action" in response.json()["error"]

    def test_health(self, settings):
        """Health check endpoint."""
        assert make_client(settings).get("/health").json() == {"status": "healthy"}


class TestActions:
    """Actions through the endpoint."""

    def test_save_and_list(self, settings):
        """Saved plans come back as the full list."""
        client = make_client(settings)
        client.post("/api/travel", json={"action": "savePlan", "payload": saved_plan_payload(1)})
        response = client.post("/api/travel", json={"action": "savePlan", "payload": saved_plan_payload(2)})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [2, 1]

    def test_delete_bad_id(self, settings):
        """A non-integer planId is a 400."""
        response = make_client(settings).post(
            "/api/travel", json={"action": "deletePlan", "payload": {"planId": "abc"}}
        )
        assert response.status_code == 400

    def test_generate_json(self, settings, plan_payload):
        """Without stream the plan comes back as one JSON document."""
        client = make_client(settings, FakeLLM(text="Plan:\n```json\n" + json.dumps(SAMPLE_PLAN) + "\n```"))

        response = client.post("/api/travel", json={"action": "generatePlan", "payload": plan_payload})

        assert response.status_code == 200
        assert response.json()["tripTitle"] == SAMPLE_PLAN["tripTitle"]

    def test_generate_stream(self, settings, plan_payload):
        """With stream the raw chunks are written as plain text."""
        document = json.dumps(SAMPLE_PLAN)
        llm = FakeLLM(chunks=[document[i:i + 32] for i in range(0, len(document), 32)])
        client = make_client(settings, llm)

        with client.stream(
            "POST", "/api/travel",
            json={"action": "generatePlan", "payload": plan_payload, "stream": True},
        ) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/plain")
            body = "".join(response.iter_text())

        assert body == document
        assert llm.closed

    def test_stream_error_truncates(self, settings, plan_payload):
        """A mid-stream failure ends the body without an error suffix."""
        llm = FakeLLM(chunks=['{"tripTitle": ', '"X", ', '"tripOverview": "'], fail_after=2)
        client = make_client(settings, llm)

        response = client.post(
            "/api/travel",
            json={"action": "generatePlan", "payload": plan_payload, "stream": True},
        )

        assert response.status_code == 200
        assert response.text == '{"tripTitle": "X", '

    def test_stream_failure_before_output(self, settings, plan_payload):
        """A failure before the first chunk is a JSON 500."""
        client = make_client(settings, FakeLLM(fail_on_start=True))

        response = client.post(
            "/api/travel",
            json={"action": "generatePlan", "payload": plan_payload, "stream": True},
        )

        assert response.status_code == 500
        assert "error" in response.json()

    def test_stream_flag_ignored_for_other_actions(self, settings):
        """Only generatePlan streams."""
        response = make_client(settings).post("/api/travel", json={"action": "getPlans", "stream": True})

        assert response.status_code == 200
        assert response.json() == []


class TestRelayChunks:
    """Writing a forwarded stream to the response."""

    @pytest.mark.asyncio
    async def test_disconnect_closes_upstream(self, settings, plan_payload):
        """A response cancelled after the first chunk closes the model stream."""
        llm = FakeLLM(chunks=['{"tripTitle": ', '"X", ', '"tripOverview": "Y"}'])
        dispatcher = make_dispatcher(settings, llm)
        result = await dispatcher.dispatch("generatePlan", plan_payload, streaming=True)

        body = relay_chunks(result.body)
        first = await body.__anext__()
        await body.aclose()

        assert first == '{"tripTitle": '
        assert llm.closed
        assert llm.pulled == 1
