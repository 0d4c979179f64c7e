import json

import httpx

from truthguard.main import CORS_HEADERS
from truthguard.schemas import AnalysisResult, HealthResponse


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    health = HealthResponse(**resp.json())
    assert health.status == "ok"


def test_no_content_returns_400_without_calling_gateway(client, gateway):
    resp = client.post("/analyze-content", json={"text": None, "imageUrl": None})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No content provided for analysis"}
    assert gateway.calls == []


def test_blank_text_counts_as_no_content(client, gateway):
    resp = client.post("/analyze-content", json={"text": "   \n\t", "imageUrl": ""})
    assert resp.status_code == 400
    assert gateway.calls == []


def test_empty_body_object_is_no_content(client, gateway):
    resp = client.post("/analyze-content", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No content provided for analysis"
    assert gateway.calls == []


def test_malformed_body_is_a_client_error(client, gateway):
    resp = client.post("/analyze-content", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"
    assert gateway.calls == []


def test_text_analysis_passes_valid_reply_through(client, gateway):
    verdict = {
        "result": "fake",
        "confidence": 92,
        "keywords": ["sensationalism", "no sources"],
        "explanation": "Extraordinary claim with no evidence.",
    }
    gateway.reply_with(json.dumps(verdict))

    resp = client.post(
        "/analyze-content",
        json={"text": "Scientists confirm the moon is made of cheese!!!", "imageUrl": None},
    )
    assert resp.status_code == 200
    assert resp.json() == verdict


def test_reply_in_code_fence_is_extracted(client, gateway):
    gateway.reply_with(
        'Here you go:\n```json\n{"result": "real", "confidence": 64, '
        '"keywords": ["official source"], "explanation": "Matches public records."}\n```'
    )
    resp = client.post("/analyze-content", json={"text": "Central bank holds rates steady"})
    data = resp.json()
    assert resp.status_code == 200
    assert data["result"] == "real"
    assert data["confidence"] == 64


def test_unparseable_reply_falls_back_to_heuristic(client, gateway):
    reply = "This looks FAKE to me because of the all-caps headline. " * 10
    gateway.reply_with(reply)

    resp = client.post("/analyze-content", json={"text": "BREAKING!!!"})
    assert resp.status_code == 200
    assert resp.json() == {
        "result": "fake",
        "confidence": 75,
        "keywords": ["AI analysis"],
        "explanation": reply[:200],
    }


def test_empty_completion_falls_back_to_real(client, gateway):
    gateway.response = httpx.Response(200, json={"choices": []})
    resp = client.post("/analyze-content", json={"text": "hello"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["result"] == "real"
    assert data["explanation"] == ""


def test_response_matches_result_shape(client, gateway):
    gateway.reply_with('{"result": "real", "confidence": 80, "keywords": [], "explanation": "ok"}')
    resp = client.post("/analyze-content", json={"text": "Scientists confirm the moon is made of cheese!!!"})
    result = AnalysisResult(**resp.json())
    assert result.result in ("real", "fake")
    assert 0 <= result.confidence <= 100


def test_upstream_request_shape(client, gateway, settings):
    gateway.reply_with('{"result": "real", "confidence": 50}')
    client.post(
        "/analyze-content",
        json={"text": "Some claim", "imageUrl": "https://cdn.test/pic.png"},
    )

    assert len(gateway.calls) == 1
    request = gateway.calls[0]
    assert str(request.url) == settings.gateway_url
    assert request.headers["Authorization"] == "Bearer test-key"

    payload = gateway.last_payload
    assert payload["model"] == settings.model
    assert payload["temperature"] == 0.7
    system, user = payload["messages"]
    assert system["role"] == "system"
    assert "fake news detector" in system["content"]
    assert user["role"] == "user"
    assert [part["type"] for part in user["content"]] == ["text", "image_url"]
    assert user["content"][1]["image_url"]["url"] == "https://cdn.test/pic.png"


def test_rate_limit_maps_to_429(client, gateway):
    gateway.response = httpx.Response(429, text="too many requests")
    resp = client.post("/analyze-content", json={"text": "hello"})
    assert resp.status_code == 429
    assert resp.json() == {"error": "Rate limit exceeded. Please try again later."}


def test_exhausted_credits_maps_to_402(client, gateway):
    gateway.response = httpx.Response(402, text="payment required")
    resp = client.post("/analyze-content", json={"imageUrl": "https://cdn.test/pic.png"})
    assert resp.status_code == 402
    assert resp.json() == {"error": "AI credits exhausted. Please add credits to continue."}


def test_other_upstream_errors_map_to_500(client, gateway):
    gateway.response = httpx.Response(503, text="upstream down")
    resp = client.post("/analyze-content", json={"text": "hello"})
    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "AI Gateway error: 503 upstream down"
    assert data["details"] == "Failed to analyze content"


def test_transport_failure_maps_to_500(client, gateway):
    gateway.response = httpx.ConnectError("connection refused")
    resp = client.post("/analyze-content", json={"text": "hello"})
    assert resp.status_code == 500
    assert resp.json()["details"] == "Failed to analyze content"


def test_missing_api_key_is_a_500(make_client, settings, gateway):
    client = make_client(settings.model_copy(update={"api_key": None}))
    resp = client.post("/analyze-content", json={"text": "hello"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "LOVABLE_API_KEY is not configured"
    assert gateway.calls == []


def test_missing_api_key_still_rejects_empty_input_with_400(make_client, settings):
    client = make_client(settings.model_copy(update={"api_key": None}))
    resp = client.post("/analyze-content", json={"text": None, "imageUrl": None})
    assert resp.status_code == 400


def test_plain_options_short_circuits(client, gateway):
    resp = client.options("/analyze-content")
    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert gateway.calls == []


def test_cors_preflight(client):
    resp = client.options(
        "/analyze-content",
        headers={
            "Origin": "https://truthguard.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, x-requested-with",
        },
    )
    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["access-control-allow-headers"] == CORS_HEADERS["Access-Control-Allow-Headers"]


def test_options_on_any_path_short_circuits(client, gateway):
    resp = client.options("/health", headers={"Origin": "https://truthguard.example"})
    assert resp.status_code == 200
    assert resp.content == b""
    assert gateway.calls == []


def test_error_bodies_carry_cors_headers(client):
    resp = client.post("/analyze-content", json={"text": None, "imageUrl": None})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_metrics_endpoint_exposes_counters(client, gateway):
    gateway.reply_with("not json at all")
    client.post("/analyze-content", json={"text": "hello"})

    resp = client.get("/metrics")
    assert resp.status_code == 200
    body = resp.text
    assert "analyze_requests_total" in body
    assert 'analyze_parse_strategy_total{strategy="heuristic"}' in body


def test_null_keywords_do_not_flip_the_verdict(client, gateway):
    gateway.reply_with(
        '{"result": "real", "confidence": 91, "keywords": null, '
        '"explanation": "Quotes match the transcript, no fake quotes."}'
    )
    resp = client.post("/analyze-content", json={"text": "Minister quoted in interview"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["result"] == "real"
    assert data["confidence"] == 91
    assert data["keywords"] == []
