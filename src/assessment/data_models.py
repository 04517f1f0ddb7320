from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


Severity = Literal["Minor", "Moderate", "Severe", "Critical"]
SkillLevel = Literal["DIY", "Intermediate", "Professional"]
SafetyImpact = Literal["None", "Minor", "Significant", "Critical"]
Likelihood = Literal["Low", "Medium", "High"]
RepairAction = Literal["Repair", "Replace"]
Recommendation = Literal["Economical to Repair", "Borderline", "Consider Total Loss"]

PRODUCTS: tuple[str, ...] = ("full_report", "ebay_upgrade")
SUPPORTED_MEDIA_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/gif", "image/webp")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Range(CamelModel):
    low: float = Field(ge=0)
    high: float = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "Range":
        if self.low > self.high:
            raise ValueError(f"range low {self.low} exceeds high {self.high}")
        return self


class ValueRange(Range):
    average: float = Field(ge=0)


class VehicleInfo(CamelModel):
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    detected_from_image: bool = False


class AssessmentSummary(CamelModel):
    overall_severity: Severity
    primary_damage_type: str
    estimated_repair_difficulty: SkillLevel
    safety_impact: SafetyImpact
    driveable: bool
    summary_text: str


class DamagedPart(CamelModel):
    name: str
    location: str
    damage_type: str
    severity: Severity
    repair_or_replace: RepairAction
    estimated_part_cost: Range
    estimated_labor_cost: Range
    labor_hours: Range
    skill_required: SkillLevel
    notes: Optional[str] = None


class HiddenDamage(CamelModel):
    potential_issue: str
    likelihood: Likelihood
    description: str
    estimated_additional_cost: Range
    recommended_inspection: str


class CostBreakdown(CamelModel):
    parts_cost_low: float = Field(ge=0)
    parts_cost_high: float = Field(ge=0)
    labor_cost_low: float = Field(ge=0)
    labor_cost_high: float = Field(ge=0)
    total_cost_low: float = Field(ge=0)
    total_cost_high: float = Field(ge=0)
    hidden_damage_cost_low: float = Field(ge=0)
    hidden_damage_cost_high: float = Field(ge=0)
    grand_total_low: float = Field(ge=0)
    grand_total_high: float = Field(ge=0)

    @model_validator(mode="after")
    def _consistent(self) -> "CostBreakdown":
        for name in ("parts_cost", "labor_cost", "total_cost", "hidden_damage_cost", "grand_total"):
            low, high = getattr(self, f"{name}_low"), getattr(self, f"{name}_high")
            if low > high:
                raise ValueError(f"{name} low {low} exceeds high {high}")
        for side in ("low", "high"):
            expected = getattr(self, f"total_cost_{side}") + getattr(self, f"hidden_damage_cost_{side}")
            if not math.isclose(getattr(self, f"grand_total_{side}"), expected, abs_tol=0.01):
                raise ValueError(f"grand_total_{side} does not equal subtotal plus hidden damage")
        return self


class MarketValueComparison(CamelModel):
    estimated_market_value: ValueRange
    repair_to_value_ratio: float = Field(ge=0)
    recommendation: Recommendation
    explanation: str


class AssessmentContent(CamelModel):
    """The part of a record produced by the vision model."""

    vehicle_info: VehicleInfo = Field(default_factory=VehicleInfo)
    summary: AssessmentSummary
    damaged_parts: list[DamagedPart] = Field(default_factory=list)
    hidden_damage: list[HiddenDamage] = Field(default_factory=list)
    cost_breakdown: CostBreakdown
    market_value_comparison: MarketValueComparison
    repair_recommendations: list[str] = Field(default_factory=list)
    safety_warnings: list[str] = Field(default_factory=list)


class AssessmentRecord(AssessmentContent):
    id: str
    created_at: datetime
    image_urls: list[str] = Field(default_factory=list)


class PaymentStatus(CamelModel):
    assessment_id: str
    has_paid_for_full_report: bool = False
    has_paid_for_ebay_upgrade: bool = False


@dataclass(frozen=True)
class ImageInput:
    data: bytes
    media_type: str


@dataclass(frozen=True)
class VehicleHint:
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.year or self.make or self.model)
