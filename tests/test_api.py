import base64
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from assessment.errors import UpstreamError
from conftest import FakeLLM, completed_checkout_event, sign_webhook
from webapi.api import create_app
from webapi.settings import ServiceSettings

IMAGE = {"data": base64.b64encode(b"\xff\xd8\xff\xe0jpeg").decode(), "mediaType": "image/jpeg"}


def _settings(**overrides):
    values = {
        "ANTHROPIC_API_KEY": "sk-ant-test",
        "OPENAI_API_KEY": "",
        "GEMINI_API_KEY": "",
        "GROK_API_KEY": "",
        "STRIPE_SECRET_KEY": "",
        "STRIPE_WEBHOOK_SECRET": "",
        "POSTGRES_DSN": "",
        "LOG_FORMAT": "text",
    }
    values.update(overrides)
    return ServiceSettings(**values)


@pytest.fixture
def client(assessment_reply):
    app = create_app(_settings(), llm=FakeLLM(assessment_reply))
    with TestClient(app) as c:
        yield c


def _assess(client):
    resp = client.post("/assess", json={"images": [IMAGE], "vehicleInfo": {"make": "Honda"}})
    assert resp.status_code == 200
    return resp.json()["assessmentId"]


def test_assess_then_fetch(client):
    resp = client.post("/assess", json={"images": [IMAGE]})
    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert resp.headers["X-Correlation-ID"]

    record = client.get(f"/assess/{body['assessmentId']}").json()
    assert record["id"] == body["assessmentId"]
    assert record["costBreakdown"]["grandTotalLow"] == 350
    assert record["imageUrls"] == []


def test_correlation_id_echoed(client):
    resp = client.get("/health", headers={"X-Correlation-ID": "abc123"})
    assert resp.headers["X-Correlation-ID"] == "abc123"


def test_assess_without_images(client):
    resp = client.post("/assess", json={"images": []})
    assert resp.status_code == 400
    assert resp.json() == {"error": "At least one image is required"}


def test_assess_invalid_base64(client):
    resp = client.post("/assess", json={"images": [{"data": "not base64!!", "mediaType": "image/png"}]})
    assert resp.status_code == 400
    assert "base64" in resp.json()["error"]


def test_assess_accepts_data_url(client):
    image = {"data": f"data:image/jpeg;base64,{IMAGE['data']}", "mediaType": "image/jpeg"}
    assert client.post("/assess", json={"images": [image]}).status_code == 200


def test_assess_malformed_body(client):
    resp = client.post("/assess", json={"images": "nope"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_unknown_assessment_404(client):
    resp = client.get("/assess/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Assessment not found"}
    assert client.get("/assess/does-not-exist/report").status_code == 404


def test_parse_failure_is_500_and_stores_nothing():
    app = create_app(_settings(), llm=FakeLLM("Sorry, the photo is too blurry."))
    with TestClient(app) as c:
        resp = c.post("/assess", json={"images": [IMAGE]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to parse assessment results"}


def test_vendor_failure_is_500():
    app = create_app(_settings(), llm=FakeLLM(UpstreamError("Claude API error: 401")))
    with TestClient(app) as c:
        resp = c.post("/assess", json={"images": [IMAGE]})
    assert resp.status_code == 500
    assert "401" in resp.json()["error"]


def test_report_locked_until_full_report_paid(client):
    assessment_id = _assess(client)

    locked = client.get(f"/assess/{assessment_id}/report").json()
    assert locked["locked"] is True
    assert locked["costBreakdown"] is None

    resp = client.post("/payment/create-checkout", json={"assessmentId": assessment_id, "type": "full_report"})
    assert resp.json() == {"success": True}

    unlocked = client.get(f"/assess/{assessment_id}/report").json()
    assert unlocked["locked"] is False
    assert unlocked["costBreakdown"]["grandTotalHigh"] == 750


def test_payment_status_defaults_and_updates(client):
    status = client.get("/payment/status/anything").json()
    assert status == {"assessmentId": "anything", "hasPaidForFullReport": False, "hasPaidForEbayUpgrade": False}

    client.post("/payment/status/anything", json={"type": "ebay_upgrade"})
    client.post("/payment/status/anything", json={"type": "full_report"})
    status = client.get("/payment/status/anything").json()
    assert status["hasPaidForFullReport"] and status["hasPaidForEbayUpgrade"]


def test_payment_status_unknown_type(client):
    resp = client.post("/payment/status/a-1", json={"type": "lifetime"})
    assert resp.status_code == 400


def test_checkout_requires_fields(client):
    resp = client.post("/payment/create-checkout", json={"assessmentId": "a-1"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Assessment ID and payment type are required"}


def test_checkout_with_stripe(assessment_reply):
    app = create_app(_settings(STRIPE_SECRET_KEY="sk_test_x"), llm=FakeLLM(assessment_reply))
    session = MagicMock(id="cs_9", url="https://checkout.stripe.com/c/cs_9")
    with TestClient(app) as c, patch("webapi.billing.stripe.checkout.Session.create", return_value=session):
        resp = c.post("/payment/create-checkout", json={"assessmentId": "a-9", "type": "ebay_upgrade"})
        assert resp.json() == {"url": "https://checkout.stripe.com/c/cs_9"}
        assert c.get("/payment/status/a-9").json()["hasPaidForEbayUpgrade"] is False


def test_webhook_marks_paid(assessment_reply):
    app = create_app(
        _settings(STRIPE_SECRET_KEY="sk_test_x", STRIPE_WEBHOOK_SECRET="whsec_x"),
        llm=FakeLLM(assessment_reply),
    )
    payload = json.dumps(completed_checkout_event(assessment_id="a-7"))
    with TestClient(app) as c:
        resp = c.post("/payment/webhook", content=payload, headers={"Stripe-Signature": sign_webhook(payload, "whsec_x")})
        assert resp.status_code == 200
        assert resp.json() == {"received": True, "message": "Marked full_report paid"}
        assert c.get("/payment/status/a-7").json()["hasPaidForFullReport"] is True


def test_webhook_forged_signature_rejected(assessment_reply):
    app = create_app(
        _settings(STRIPE_SECRET_KEY="sk_test_x", STRIPE_WEBHOOK_SECRET="whsec_x"),
        llm=FakeLLM(assessment_reply),
    )
    payload = json.dumps(completed_checkout_event(assessment_id="a-8"))
    with TestClient(app) as c:
        resp = c.post("/payment/webhook", content=payload, headers={"Stripe-Signature": "t=1,v1=deadbeef"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid webhook signature"}
        assert c.get("/payment/status/a-8").json()["hasPaidForFullReport"] is False


def test_webhook_without_secret_rejected(client):
    resp = client.post("/payment/webhook", content=b"{}", headers={"Stripe-Signature": "x"})
    assert resp.status_code == 400


def test_parts_search_requires_upgrade(client):
    assessment_id = _assess(client)
    body = {"assessmentId": assessment_id, "partName": "Front Bumper"}

    resp = client.post("/parts/search", json=body)
    assert resp.status_code == 402
    assert "error" in resp.json()

    client.post("/payment/create-checkout", json={"assessmentId": assessment_id, "type": "ebay_upgrade"})
    result = client.post("/parts/search", json=body).json()
    prices = [item["price"] for item in result["results"]]
    assert prices == sorted(prices)
    assert result["searchQuery"] == "Front Bumper 2019 Honda Civic"


def test_parts_search_requires_fields(client):
    assert client.post("/parts/search", json={"partName": "Hood"}).status_code == 400


def test_marketing_generate():
    llm = FakeLLM('{"headline": "Dented?", "body": "We can help", "hashtags": ["#cars"], "cta": "Go"}')
    app = create_app(_settings(), llm=llm)
    with TestClient(app) as c:
        resp = c.post("/marketing/generate", json={"topic": "Hail damage", "channel": "LinkedIn"})
    assert resp.status_code == 200
    assert resp.json()["content"]["headline"] == "Dented?"
    assert resp.json()["content"]["platform"] == "LinkedIn"
    assert llm.calls[0]["api_key"] == "sk-ant-test"


def test_marketing_ideate_requires_brand(client):
    resp = client.post("/marketing/ideate", json={"provider": "Claude", "apiKey": "k"})
    assert resp.status_code == 400


def test_marketing_unknown_provider(client):
    resp = client.post("/marketing/generate", json={"provider": "Bard", "topic": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown provider: Bard"}


def test_marketing_content_set():
    pieces = {"pieces": [{"platform": "blog", "contentType": "Article", "headline": "H", "body": "B"}]}
    app = create_app(_settings(), llm=FakeLLM(json.dumps(pieces)))
    with TestClient(app) as c:
        resp = c.post("/marketing/content-set", json={
            "brand": {"name": "Dentwise"},
            "concept": {"title": "Storm season"},
            "platformIds": ["blog"],
        })
    assert resp.status_code == 200
    assert resp.json()["pieces"][0]["contentType"] == "Article"


def test_marketing_generate_video():
    script = {"title": "T", "hook": "H", "scenes": [{"sceneNumber": 1, "visual": "V", "narration": "N", "duration": "4s"}]}
    app = create_app(_settings(), llm=FakeLLM(json.dumps(script)))
    with TestClient(app) as c:
        resp = c.post("/marketing/generate-video", json={"topic": "Hail", "platform": "TikTok", "videoType": "Short"})
        assert resp.status_code == 200
        body = resp.json()["script"]
        assert body["scenes"][0] == {"sceneNumber": 1, "visual": "V", "narration": "N", "duration": "4s"}
        assert body["totalDuration"] == ""

        resp = c.post("/marketing/generate-video", json={"topic": ""})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Topic is required."}


def test_marketing_import_brand():
    page = '<html><head><title>Dentwise</title><meta property="og:image" content="/og.png"></head><body>Hi</body></html>'
    site = httpx.MockTransport(lambda request: httpx.Response(200, text=page))
    reply = json.dumps({"name": "Dentwise", "tagline": "Know before you tow", "colors": ["#0A84FF"]})
    app = create_app(_settings(), llm=FakeLLM(reply), fetch_transport=site)
    with TestClient(app) as c:
        resp = c.post("/marketing/import-brand", json={"url": "dentwise.example"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["brand"]["name"] == "Dentwise"
        assert body["brand"]["colors"] == ["#0A84FF"]
        assert body["logoCandidates"] == ["https://dentwise.example/og.png"]

        resp = c.post("/marketing/import-brand", json={"url": "not a site"})
        assert resp.status_code == 400
        assert resp.json()["error"].startswith('Invalid URL: "not a site"')


def test_health_and_readiness(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/healthz").json() == {"status": "ok"}
    ready = client.get("/ready").json()
    assert ready["status"] == "ready"
    assert ready["checks"] == {"storage": True, "assessment_provider_key": True}


def test_misconfigured_provider_fails_at_startup(assessment_reply):
    with pytest.raises(ValueError, match="Unsupported assessment provider"):
        create_app(_settings(ASSESSMENT_PROVIDER="Bard"), llm=FakeLLM(assessment_reply))
