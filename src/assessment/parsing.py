from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError as SchemaError

from assessment.data_models import AssessmentContent
from assessment.errors import ParseError

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_ANY_FENCE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)


def strip_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text itself if unfenced."""
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    body = match.group(1) if match and match.group(1) else text
    return body.strip()


def reconcile_cost_breakdown(payload: dict[str, Any]) -> dict[str, Any]:
    """Recompute grand totals as subtotal plus hidden damage when the model disagrees."""
    breakdown = payload.get("costBreakdown")
    if not isinstance(breakdown, dict):
        return payload
    fixed = dict(breakdown)
    for side in ("Low", "High"):
        subtotal = fixed.get(f"totalCost{side}")
        hidden = fixed.get(f"hiddenDamageCost{side}")
        if not isinstance(subtotal, (int, float)) or not isinstance(hidden, (int, float)):
            continue
        expected = subtotal + hidden
        reported = fixed.get(f"grandTotal{side}")
        if reported != expected:
            logger.warning(
                "Recomputed grandTotal%s: model reported %s, components sum to %s",
                side, reported, expected,
            )
            fixed[f"grandTotal{side}"] = expected
    return {**payload, "costBreakdown": fixed}


def parse_assessment_reply(raw: str) -> AssessmentContent:
    try:
        payload = json.loads(strip_fences(raw))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse assessment response: %s", exc, extra={"extra_data": {"raw": raw}})
        raise ParseError("Failed to parse assessment results") from exc

    if not isinstance(payload, dict):
        logger.error("Assessment response is not a JSON object", extra={"extra_data": {"raw": raw}})
        raise ParseError("Failed to parse assessment results")

    try:
        return AssessmentContent.model_validate(reconcile_cost_breakdown(payload))
    except SchemaError as exc:
        logger.error(
            "Assessment response does not match schema: %s", exc.errors(include_url=False),
            extra={"extra_data": {"raw": raw}},
        )
        raise ParseError("Failed to parse assessment results") from exc
