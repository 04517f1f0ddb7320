import hashlib
import hmac
import json
import time

import pytest

from webapi.storage import AssessmentStore, PaymentStatusStore, PostgresStore


def make_assessment_payload() -> dict:
    return {
        "vehicleInfo": {"year": 2019, "make": "Honda", "model": "Civic", "detectedFromImage": True},
        "summary": {
            "overallSeverity": "Moderate",
            "primaryDamageType": "Front-end collision",
            "estimatedRepairDifficulty": "Professional",
            "safetyImpact": "Minor",
            "driveable": True,
            "summaryText": "Front bumper cracked and left headlight broken.",
        },
        "damagedParts": [
            {
                "name": "Front Bumper Cover",
                "location": "Front",
                "damageType": "Crack",
                "severity": "Moderate",
                "repairOrReplace": "Replace",
                "estimatedPartCost": {"low": 150, "high": 300},
                "estimatedLaborCost": {"low": 60, "high": 120},
                "laborHours": {"low": 1, "high": 2},
                "skillRequired": "Intermediate",
                "notes": "Check mounting tabs",
            },
            {
                "name": "Left Headlight Assembly",
                "location": "Front Left",
                "damageType": "Shattered lens",
                "severity": "Minor",
                "repairOrReplace": "Replace",
                "estimatedPartCost": {"low": 50, "high": 100},
                "estimatedLaborCost": {"low": 40, "high": 80},
                "laborHours": {"low": 0.5, "high": 1},
                "skillRequired": "DIY",
            },
        ],
        "hiddenDamage": [
            {
                "potentialIssue": "Bent radiator support",
                "likelihood": "Medium",
                "description": "Impact may have pushed the radiator support back.",
                "estimatedAdditionalCost": {"low": 50, "high": 150},
                "recommendedInspection": "Measure support alignment",
            }
        ],
        "costBreakdown": {
            "partsCostLow": 200,
            "partsCostHigh": 400,
            "laborCostLow": 100,
            "laborCostHigh": 200,
            "totalCostLow": 300,
            "totalCostHigh": 600,
            "hiddenDamageCostLow": 50,
            "hiddenDamageCostHigh": 150,
            "grandTotalLow": 350,
            "grandTotalHigh": 750,
        },
        "marketValueComparison": {
            "estimatedMarketValue": {"low": 14000, "high": 18000, "average": 16000},
            "repairToValueRatio": 3.4,
            "recommendation": "Economical to Repair",
            "explanation": "Repair cost is a small fraction of the car's value.",
        },
        "repairRecommendations": ["Replace bumper cover", "Replace headlight"],
        "safetyWarnings": ["Headlight inoperative at night"],
    }


class FakeLLM:
    """Stands in for ProviderClient; returns canned replies in order."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, provider, *, api_key, system, prompt, images=(), model=None, max_tokens=2048):
        self.calls.append({
            "provider": provider,
            "api_key": api_key,
            "system": system,
            "prompt": prompt,
            "images": list(images),
            "model": model,
            "max_tokens": max_tokens,
        })
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def assessment_payload():
    return make_assessment_payload()


@pytest.fixture
def assessment_reply(assessment_payload):
    return json.dumps(assessment_payload)


@pytest.fixture
def backend():
    return PostgresStore(dsn="")


@pytest.fixture
def assessment_store(backend):
    return AssessmentStore(backend)


@pytest.fixture
def payment_store(backend):
    return PaymentStatusStore(backend)


def completed_checkout_event(assessment_id="a-1", product="full_report", payment_status="paid"):
    return {
        "id": "evt_1",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_1",
            "object": "checkout.session",
            "payment_status": payment_status,
            "metadata": {"assessmentId": assessment_id, "type": product},
        }},
    }


def sign_webhook(payload: str, secret: str, timestamp=None) -> str:
    """Builds a Stripe-Signature header the way Stripe signs webhook deliveries."""
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{ts}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"
