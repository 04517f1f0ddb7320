from __future__ import annotations

import base64
import binascii
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from assessment.config import AssessmentConfig
from assessment.data_models import ImageInput, VehicleHint
from assessment.errors import NotFoundError, ServiceError, ValidationError
from assessment.parts_catalog import mock_search
from assessment.redaction import redact
from marketing.models import BrandProfile, ConceptBrief
from webapi.billing import StripeBilling
from webapi.content import ContentStudio
from webapi.llm import ProviderClient
from webapi.logging_config import configure_logging, correlation_id, new_correlation_id
from webapi.payments import PaymentGate
from webapi.pipeline import DamageAssessmentPipeline
from webapi.settings import ServiceSettings
from webapi.storage import AssessmentStore, PaymentStatusStore, PostgresStore

logger = logging.getLogger(__name__)


# ── Request / Response Models ───────────────────────────────────────

class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImagePayload(_Body):
    data: str
    media_type: str = "image/jpeg"


class VehicleInfoPayload(_Body):
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None

    def to_hint(self) -> VehicleHint:
        return VehicleHint(year=self.year, make=self.make, model=self.model)


class AssessRequest(_Body):
    images: list[ImagePayload] = Field(default_factory=list)
    vehicle_info: Optional[VehicleInfoPayload] = None


class AssessResponse(_Body):
    assessment_id: str
    success: bool = True


class CheckoutRequest(_Body):
    assessment_id: Optional[str] = None
    type: Optional[str] = None


class PaymentUpdateRequest(_Body):
    type: Optional[str] = None


class PartSearchRequest(_Body):
    assessment_id: Optional[str] = None
    part_name: Optional[str] = None
    vehicle_info: Optional[VehicleInfoPayload] = None


class _ProviderRequest(_Body):
    provider: str = "Claude"
    api_key: Optional[str] = None


class GenerateRequest(_ProviderRequest):
    topic: str = ""
    keywords: str = ""
    channel: str = "Instagram"
    content_type: str = "Post"
    tone: str = "Professional"
    framework: str = "AIDA"


class IdeateRequest(_ProviderRequest):
    brand: Optional[BrandProfile] = None
    context: str = ""
    news_context: Optional[str] = None
    preference_context: str = ""


class ContentSetRequest(_ProviderRequest):
    brand: Optional[BrandProfile] = None
    concept: Optional[ConceptBrief] = None
    platform_ids: list[str] = Field(default_factory=list)
    preference_context: str = ""


class RepurposeRequest(_ProviderRequest):
    brand: Optional[BrandProfile] = None
    source_content: str = ""
    platform_ids: list[str] = Field(default_factory=list)
    preference_context: str = ""


class VideoRequest(_ProviderRequest):
    topic: str = ""
    key_message: str = ""
    video_type: str = "Short-form"
    platform: str = "TikTok"
    style: str = "Engaging"


class ImportBrandRequest(_ProviderRequest):
    url: str = ""


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, bool]


def decode_images(images: list[ImagePayload]) -> list[ImageInput]:
    decoded: list[ImageInput] = []
    for index, image in enumerate(images):
        data = image.data
        if data.startswith("data:") and "," in data:
            data = data.split(",", 1)[1]
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(f"Image {index + 1} is not valid base64") from None
        decoded.append(ImageInput(data=raw, media_type=image.media_type))
    return decoded


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# ── App Factory ─────────────────────────────────────────────────────

def create_app(
    settings: ServiceSettings | None = None,
    *,
    llm: ProviderClient | None = None,
    fetch_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or ServiceSettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)

    cfg = AssessmentConfig(
        provider=settings.assessment_provider,
        model=settings.assessment_model,
        max_tokens=settings.assessment_max_tokens,
    )
    backend = PostgresStore(dsn=settings.postgres_dsn)
    assessments = AssessmentStore(backend)
    payments = PaymentStatusStore(backend)
    llm = llm or ProviderClient(timeout=settings.llm_timeout_seconds)
    provider_keys = settings.provider_keys()

    pipeline = DamageAssessmentPipeline(
        llm=llm,
        store=assessments,
        api_key=provider_keys.get(cfg.provider, ""),
        config=cfg,
    )
    billing = StripeBilling(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        base_url=settings.public_base_url,
    )
    gate = PaymentGate(store=payments, billing=billing, config=cfg)
    studio = ContentStudio(
        llm=llm,
        server_keys=provider_keys,
        fetch_timeout=settings.site_fetch_timeout_seconds,
        transport=fetch_transport,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await backend.connect()
        if not billing.enabled:
            logger.warning("STRIPE_SECRET_KEY not set; checkout runs in demo mode")
        try:
            yield
        finally:
            await backend.close()

    app = FastAPI(title="Car Damage Assessment API", version="1.0.0", lifespan=lifespan)

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next: Any) -> Response:
        cid = request.headers.get("X-Correlation-ID") or new_correlation_id()
        correlation_id.set(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response

    # ── Error boundary ──────────────────────────────────────────────

    @app.exception_handler(ServiceError)
    async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(HTTPException)
    async def http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # ── Damage Assessment ───────────────────────────────────────────

    @app.post("/assess")
    async def assess(payload: AssessRequest) -> dict[str, Any]:
        images = decode_images(payload.images)
        hint = payload.vehicle_info.to_hint() if payload.vehicle_info else None
        assessment_id = await pipeline.assess(images, hint)
        return _dump(AssessResponse(assessment_id=assessment_id))

    @app.get("/assess/{assessment_id}")
    async def get_assessment(assessment_id: str) -> dict[str, Any]:
        record = await assessments.get(assessment_id)
        if record is None:
            raise NotFoundError("Assessment not found")
        return _dump(record)

    @app.get("/assess/{assessment_id}/report")
    async def get_report(assessment_id: str) -> dict[str, Any]:
        record = await assessments.get(assessment_id)
        if record is None:
            raise NotFoundError("Assessment not found")
        return redact(record, await gate.get_status(assessment_id))

    # ── Payments ────────────────────────────────────────────────────

    @app.post("/payment/create-checkout")
    async def create_checkout(payload: CheckoutRequest) -> dict[str, Any]:
        if not payload.assessment_id or not payload.type:
            raise ValidationError("Assessment ID and payment type are required")
        return await gate.create_checkout(payload.assessment_id, payload.type)

    @app.get("/payment/status/{assessment_id}")
    async def get_payment_status(assessment_id: str) -> dict[str, Any]:
        return _dump(await gate.get_status(assessment_id))

    @app.post("/payment/status/{assessment_id}")
    async def mark_payment(assessment_id: str, payload: PaymentUpdateRequest) -> dict[str, Any]:
        return _dump(await gate.mark_paid(assessment_id, payload.type))

    @app.post("/payment/webhook")
    async def payment_webhook(request: Request) -> dict[str, Any]:
        body = await request.body()
        message = await gate.handle_webhook(body, request.headers.get("Stripe-Signature", ""))
        return {"received": True, "message": message}

    # ── Parts Search ────────────────────────────────────────────────

    @app.post("/parts/search")
    async def search_parts(payload: PartSearchRequest) -> dict[str, Any]:
        if not payload.part_name or not payload.assessment_id:
            raise ValidationError("Part name and assessment ID are required")
        await gate.require(payload.assessment_id, "ebay_upgrade")

        hint = payload.vehicle_info.to_hint() if payload.vehicle_info else None
        if hint is None or hint.is_empty():
            record = await assessments.get(payload.assessment_id)
            if record is not None:
                info = record.vehicle_info
                hint = VehicleHint(year=info.year, make=info.make, model=info.model)
        return _dump(mock_search(payload.part_name, hint))

    # ── Marketing ───────────────────────────────────────────────────

    @app.post("/marketing/generate")
    async def marketing_generate(payload: GenerateRequest) -> dict[str, Any]:
        piece = await studio.generate(
            provider=payload.provider, api_key=payload.api_key,
            topic=payload.topic, channel=payload.channel, content_type=payload.content_type,
            tone=payload.tone, framework=payload.framework, keywords=payload.keywords,
        )
        return {"content": _dump(piece)}

    @app.post("/marketing/ideate")
    async def marketing_ideate(payload: IdeateRequest) -> dict[str, Any]:
        concepts = await studio.ideate(
            provider=payload.provider, api_key=payload.api_key, brand=payload.brand,
            context=payload.context, news_context=payload.news_context,
            preference_context=payload.preference_context,
        )
        return {"concepts": [_dump(c) for c in concepts]}

    @app.post("/marketing/content-set")
    async def marketing_content_set(payload: ContentSetRequest) -> dict[str, Any]:
        pieces = await studio.content_set(
            provider=payload.provider, api_key=payload.api_key, brand=payload.brand,
            concept=payload.concept, platform_ids=payload.platform_ids,
            preference_context=payload.preference_context,
        )
        return {"pieces": [_dump(p) for p in pieces]}

    @app.post("/marketing/repurpose")
    async def marketing_repurpose(payload: RepurposeRequest) -> dict[str, Any]:
        pieces = await studio.repurpose(
            provider=payload.provider, api_key=payload.api_key, brand=payload.brand,
            source_content=payload.source_content, platform_ids=payload.platform_ids,
            preference_context=payload.preference_context,
        )
        return {"pieces": [_dump(p) for p in pieces]}

    @app.post("/marketing/generate-video")
    async def marketing_generate_video(payload: VideoRequest) -> dict[str, Any]:
        script = await studio.video_script(
            provider=payload.provider, api_key=payload.api_key, topic=payload.topic,
            video_type=payload.video_type, platform=payload.platform, style=payload.style,
            key_message=payload.key_message,
        )
        return {"script": _dump(script)}

    @app.post("/marketing/import-brand")
    async def marketing_import_brand(payload: ImportBrandRequest) -> dict[str, Any]:
        brand, logos = await studio.import_brand(provider=payload.provider, api_key=payload.api_key, url=payload.url)
        return {"success": True, "brand": _dump(brand), "logoCandidates": logos}

    # ── Health ──────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/ready", response_model=ReadinessResponse)
    async def ready() -> ReadinessResponse:
        checks = {
            "storage": backend.in_memory or await backend.ping(),
            "assessment_provider_key": bool(pipeline.api_key),
        }
        return ReadinessResponse(status="ready" if all(checks.values()) else "degraded", checks=checks)

    return app


app = create_app()
