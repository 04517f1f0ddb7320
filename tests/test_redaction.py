from datetime import datetime, timezone

import pytest

from assessment.data_models import AssessmentRecord, PaymentStatus
from assessment.redaction import redact


@pytest.fixture
def record(assessment_payload):
    return AssessmentRecord.model_validate({
        **assessment_payload,
        "id": "a-1",
        "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    })


def test_unpaid_view_hides_pricing(record):
    view = redact(record, PaymentStatus(assessment_id="a-1"))

    assert view["locked"] is True
    assert view["ebayUpgrade"] is False
    assert view["costBreakdown"] is None
    assert view["marketValueComparison"] is None
    assert view["repairRecommendations"] == []
    part = view["damagedParts"][0]
    assert part["name"] == "Front Bumper Cover"
    assert part["estimatedPartCost"] is None
    assert part["laborHours"] is None
    assert view["hiddenDamage"][0]["description"]
    assert view["hiddenDamage"][0]["estimatedAdditionalCost"] is None
    assert view["summary"]["summaryText"]
    assert view["safetyWarnings"] == ["Headlight inoperative at night"]


def test_paid_view_is_full_record(record):
    status = PaymentStatus(assessment_id="a-1", has_paid_for_full_report=True, has_paid_for_ebay_upgrade=True)
    view = redact(record, status)

    assert view["locked"] is False
    assert view["ebayUpgrade"] is True
    assert view["costBreakdown"]["grandTotalHigh"] == 750
    assert view["damagedParts"][0]["notes"] == "Check mounting tabs"


def test_redaction_does_not_mutate_record(record):
    redact(record, PaymentStatus(assessment_id="a-1"))
    assert record.cost_breakdown is not None
    assert record.damaged_parts[0].estimated_part_cost.high == 300
