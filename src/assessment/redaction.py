from __future__ import annotations

from typing import Any

from assessment.data_models import AssessmentRecord, PaymentStatus

_PART_PAID_FIELDS = ("estimatedPartCost", "estimatedLaborCost", "laborHours", "skillRequired", "notes")
_HIDDEN_PAID_FIELDS = ("estimatedAdditionalCost", "recommendedInspection")


def redact(record: AssessmentRecord, status: PaymentStatus) -> dict[str, Any]:
    """Build the client-visible view of a record for the given payment flags.

    Summary, vehicle info, the part list without pricing, hidden-damage
    descriptions and safety warnings are always shown. Pricing, labor,
    market value and repair recommendations need the full report.
    """
    view = record.model_dump(mode="json", by_alias=True)
    unlocked = status.has_paid_for_full_report
    view["locked"] = not unlocked
    view["ebayUpgrade"] = status.has_paid_for_ebay_upgrade
    if unlocked:
        return view

    for part in view["damagedParts"]:
        for key in _PART_PAID_FIELDS:
            part[key] = None
    for issue in view["hiddenDamage"]:
        for key in _HIDDEN_PAID_FIELDS:
            issue[key] = None
    view["costBreakdown"] = None
    view["marketValueComparison"] = None
    view["repairRecommendations"] = []
    return view
