import pytest
import httpx

from symvora.core.exceptions import InternalFailureError
from symvora.main import create_app
from symvora.services.analyzer import Analyzer

EXPECTED_ADVISORY = (
    "Based on your symptoms, here are some general possibilities:\n"
    "\n"
    "Possible Conditions:\n"
    "• Common cold or flu\n"
    "• Seasonal allergies\n"
    "• Stress-related symptoms\n"
    "\n"
    "General Advice:\n"
    "• Rest and stay hydrated\n"
    "• Monitor your symptoms\n"
    "• Avoid self-diagnosis\n"
    "\n"
    "⚠️ IMPORTANT: This is for informational purposes only. Always consult a "
    "healthcare professional for proper diagnosis and treatment."
)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"symptoms": "fever"},
    {},
    {"symptoms": "headache and sore throat since yesterday", "additional_context": "none"},
    {"symptoms": "cough", "unknown_key": [1, 2, 3]},
])
async def test_analyze_returns_fixed_advisory(client, payload):
    r = await client.post("/api/analyze", json=payload)
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"result": EXPECTED_ADVISORY}


@pytest.mark.asyncio
async def test_analyze_sets_cors_header_on_post(client):
    r = await client.post("/api/analyze", json={"symptoms": "fever"})
    assert r.headers["access-control-allow-origin"] == "*"

    r = await client.post(
        "/api/analyze", json={"symptoms": "fever"}, headers={"Origin": "https://example.test"}
    )
    assert r.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_preflight_succeeds(client):
    r = await client.options(
        "/api/analyze",
        headers={
            "Origin": "https://example.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert 200 <= r.status_code < 300
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]
    assert "Content-Type" in r.headers["access-control-allow-headers"]


@pytest.mark.asyncio
async def test_options_without_request_method_header(client):
    r = await client.options("/api/analyze", headers={"Origin": "https://example.test"})
    assert 200 <= r.status_code < 300
    assert r.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", "xyz", "{\"symptoms\": ", ""])
async def test_malformed_body_is_rejected(client, body):
    r = await client.post(
        "/api/analyze", content=body, headers={"Content-Type": "application/json"}
    )
    assert r.status_code == 400
    assert EXPECTED_ADVISORY not in r.text
    detail = r.json()["detail"]
    assert detail["error_code"] == "MALFORMED_REQUEST"
    assert detail["error_type"] == "MalformedRequestError"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [[1, 2], "fever", {"symptoms": 5}])
async def test_json_not_matching_request_is_rejected(client, payload):
    r = await client.post("/api/analyze", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"]["error_code"] == "MALFORMED_REQUEST"


@pytest.mark.asyncio
async def test_malformed_body_keeps_cors_header(client):
    r = await client.post("/api/analyze", content="xyz", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_get_is_not_allowed(client):
    r = await client.get("/api/analyze")
    assert r.status_code == 405
    assert r.json()["detail"]["error_code"] == "METHOD_NOT_ALLOWED"
    assert "POST" in r.headers.get("allow", "")


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/other", "/api/unknown"])
async def test_unknown_path_is_not_found(client, path):
    r = await client.post(path, json={})
    assert r.status_code == 404
    assert r.json()["detail"]["error_code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    r = await client.post("/api/analyze", json={}, headers={"X-Request-ID": "req-123"})
    assert r.headers["x-request-id"] == "req-123"

    r = await client.post("/api/analyze", json={})
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_error_envelope_carries_request_id(client):
    r = await client.get("/api/analyze", headers={"X-Request-ID": "req-405"})
    assert r.json()["detail"]["request_id"] == "req-405"


class ExplodingAnalyzer(Analyzer):
    name = "exploding"

    async def analyze(self, request):
        raise RuntimeError("boom")


class FailingAnalyzer(Analyzer):
    name = "failing"

    async def analyze(self, request):
        raise InternalFailureError("provider unavailable", analyzer=self.name)


@pytest.mark.asyncio
async def test_unexpected_failure_is_500(settings):
    app = create_app(settings=settings, analyzer=ExplodingAnalyzer())
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post("/api/analyze", json={"symptoms": "fever"})
    assert r.status_code == 500
    assert r.json()["detail"]["error_code"] == "INTERNAL_FAILURE"
    assert "boom" not in r.text
    assert r.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_internal_failure_is_500(settings):
    app = create_app(settings=settings, analyzer=FailingAnalyzer())
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post("/api/analyze", json={"symptoms": "fever"})
    assert r.status_code == 500
    detail = r.json()["detail"]
    assert detail["error_type"] == "InternalFailureError"
    assert detail["message"] == "Analysis failed: provider unavailable"


@pytest.mark.asyncio
async def test_restricted_origins(settings):
    settings.CORS_ORIGINS = ["https://allowed.test"]
    app = create_app(settings=settings)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        allowed = await ac.post("/api/analyze", json={}, headers={"Origin": "https://allowed.test"})
        denied = await ac.post("/api/analyze", json={}, headers={"Origin": "https://other.test"})
    assert allowed.headers["access-control-allow-origin"] == "https://allowed.test"
    assert allowed.headers["vary"] == "Origin"
    assert "access-control-allow-origin" not in denied.headers
