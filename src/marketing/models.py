from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BrandProfile(_Model):
    name: str
    tagline: str = ""
    website: str = ""
    description: str = ""
    products: str = ""
    target_audience: str = ""
    voice: str = ""
    tone: str = ""
    values: str = ""
    usps: str = ""
    mission: str = ""
    pricing: str = ""
    content_themes: str = ""
    channels: list[str] = Field(default_factory=list)
    guidelines: str = ""


class ImportedBrand(BrandProfile):
    """Brand profile recovered from a company website."""

    logo: str = ""
    colors: list[str] = Field(default_factory=list)

    @field_validator(
        "tagline", "description", "products", "target_audience", "voice", "tone",
        "values", "usps", "mission", "pricing", "content_themes",
        mode="before",
    )
    @classmethod
    def _join_lists(cls, value):
        # Models sometimes answer list-valued fields with arrays.
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        return value


class ConceptBrief(_Model):
    title: str
    hook: str = ""
    angle: str = ""


class ContentPiece(_Model):
    platform: str = ""
    content_type: str = ""
    headline: str = ""
    body: str = ""
    hashtags: list[str] = Field(default_factory=list)
    cta: str = ""
    image_prompt: str = ""


class Concept(_Model):
    title: str
    hook: str = ""
    angle: str = ""
    reasoning: str = ""
    news_reference: Optional[str] = None
    trend_reference: Optional[str] = None
    suggested_platforms: list[str] = Field(default_factory=list)


class VideoScene(_Model):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    scene_number: int
    visual: str = ""
    narration: str = ""
    duration: str = ""


class VideoScript(_Model):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    title: str = ""
    hook: str = ""
    scenes: list[VideoScene] = Field(min_length=1)
    cta: str = ""
    music: str = ""
    total_duration: str = ""
