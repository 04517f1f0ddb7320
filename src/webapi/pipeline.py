from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Sequence
from uuid import uuid4

from assessment.config import AssessmentConfig
from assessment.data_models import SUPPORTED_MEDIA_TYPES, AssessmentRecord, ImageInput, VehicleHint
from assessment.errors import ValidationError
from assessment.parsing import parse_assessment_reply
from assessment.prompts import SYSTEM_PROMPT, build_user_prompt
from webapi.llm import Provider, ProviderClient
from webapi.storage import AssessmentStore

logger = logging.getLogger(__name__)


class DamageAssessmentPipeline:
    """Images in, one model call, one stored record out.

    Nothing is written unless the reply parses into a complete record.
    """

    def __init__(
        self,
        *,
        llm: ProviderClient,
        store: AssessmentStore,
        api_key: str,
        config: AssessmentConfig | None = None,
    ) -> None:
        self.llm = llm
        self.store = store
        self.api_key = api_key
        self.config = config or AssessmentConfig()
        try:
            self.provider = Provider(self.config.provider)
        except ValueError:
            choices = ", ".join(p.value for p in Provider)
            raise ValueError(f"Unsupported assessment provider {self.config.provider!r}; expected one of {choices}") from None

    @staticmethod
    def validate_images(images: Sequence[ImageInput]) -> None:
        if not images:
            raise ValidationError("At least one image is required")
        for index, image in enumerate(images):
            if image.media_type not in SUPPORTED_MEDIA_TYPES:
                raise ValidationError(f"Image {index + 1} has unsupported media type {image.media_type!r}")
            if not image.data:
                raise ValidationError(f"Image {index + 1} is empty")

    async def assess(self, images: Sequence[ImageInput], vehicle_hint: VehicleHint | None = None) -> str:
        self.validate_images(images)

        t0 = time.monotonic()
        reply = await self.llm.complete(
            self.provider,
            api_key=self.api_key,
            system=SYSTEM_PROMPT,
            prompt=build_user_prompt(vehicle_hint),
            images=images,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
        )
        content = parse_assessment_reply(reply)

        assessment_id = str(uuid4())
        record = AssessmentRecord.model_validate({
            **content.model_dump(),
            "id": assessment_id,
            "created_at": datetime.now(timezone.utc),
            "image_urls": [],
        })
        await self.store.put(assessment_id, record)

        logger.info(
            "Assessment %s stored",
            assessment_id,
            extra={"extra_data": {
                "images": len(images),
                "severity": record.summary.overall_severity,
                "parts": len(record.damaged_parts),
                "seconds": round(time.monotonic() - t0, 3),
            }},
        )
        return assessment_id
