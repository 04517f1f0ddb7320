from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, MetaData, String, Table, insert, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from assessment.data_models import AssessmentRecord, PaymentStatus

logger = logging.getLogger(__name__)


metadata = MetaData()

assessments_table = Table(
    "assessments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("record_json", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

payment_status_table = Table(
    "payment_status",
    metadata,
    Column("assessment_id", String(64), primary_key=True),
    Column("has_paid_for_full_report", Boolean, nullable=False, default=False),
    Column("has_paid_for_ebay_upgrade", Boolean, nullable=False, default=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class PostgresStore:
    """Keyed storage for assessments and payment flags.

    Falls back to process-local dicts when no DSN is configured or the
    database cannot be reached, which is the demo deployment.
    """

    def __init__(self, dsn: str) -> None:
        self.dsn = dsn
        self.engine: AsyncEngine | None = None
        self._fallback_mode = False
        self._mem_assessments: dict[str, dict[str, Any]] = {}
        self._mem_payments: dict[str, dict[str, bool]] = {}

    async def connect(self) -> None:
        if not self.dsn:
            self._fallback_mode = True
            return
        try:
            self.engine = create_async_engine(self.dsn, future=True)
            await self.init_schema()
        except Exception as exc:
            logger.warning("Database unavailable, using in-memory storage: %s", exc)
            self._fallback_mode = True
            self.engine = None

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()

    @property
    def in_memory(self) -> bool:
        return self.engine is None

    async def ping(self) -> bool:
        if self.engine is None or self._fallback_mode:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(select(1))
            return True
        except Exception:
            return False

    async def init_schema(self) -> None:
        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    # ── Assessments ────────────────────────────────────────────────

    async def put_assessment(self, assessment_id: str, record_json: dict[str, Any]) -> None:
        if self.engine is None:
            self._mem_assessments[assessment_id] = record_json
            return
        async with self.engine.begin() as conn:
            existing = (await conn.execute(
                select(assessments_table.c.id).where(assessments_table.c.id == assessment_id)
            )).first()
            if existing is None:
                await conn.execute(insert(assessments_table).values(
                    id=assessment_id,
                    record_json=record_json,
                    created_at=datetime.now(timezone.utc),
                ))
            else:
                await conn.execute(
                    update(assessments_table)
                    .where(assessments_table.c.id == assessment_id)
                    .values(record_json=record_json)
                )

    async def get_assessment(self, assessment_id: str) -> dict[str, Any] | None:
        if self.engine is None:
            return self._mem_assessments.get(assessment_id)
        stmt = select(assessments_table.c.record_json).where(assessments_table.c.id == assessment_id)
        async with self.engine.connect() as conn:
            row = (await conn.execute(stmt)).first()
        return dict(row.record_json) if row else None

    # ── Payment flags ──────────────────────────────────────────────

    async def get_payment_flags(self, assessment_id: str) -> dict[str, bool] | None:
        if self.engine is None:
            flags = self._mem_payments.get(assessment_id)
            return dict(flags) if flags is not None else None
        stmt = select(
            payment_status_table.c.has_paid_for_full_report,
            payment_status_table.c.has_paid_for_ebay_upgrade,
        ).where(payment_status_table.c.assessment_id == assessment_id)
        async with self.engine.connect() as conn:
            row = (await conn.execute(stmt)).first()
        return dict(row._mapping) if row else None

    async def write_payment_flags(self, assessment_id: str, flags: dict[str, bool]) -> None:
        if self.engine is None:
            self._mem_payments[assessment_id] = dict(flags)
            return
        values = {**flags, "updated_at": datetime.now(timezone.utc)}
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(payment_status_table)
                .where(payment_status_table.c.assessment_id == assessment_id)
                .values(**values)
            )
            if result.rowcount == 0:
                await conn.execute(insert(payment_status_table).values(assessment_id=assessment_id, **values))


class AssessmentStore:
    def __init__(self, backend: PostgresStore) -> None:
        self.backend = backend

    async def put(self, assessment_id: str, record: AssessmentRecord) -> None:
        await self.backend.put_assessment(assessment_id, record.model_dump(mode="json", by_alias=True))

    async def get(self, assessment_id: str) -> AssessmentRecord | None:
        raw = await self.backend.get_assessment(assessment_id)
        return None if raw is None else AssessmentRecord.model_validate(raw)


class PaymentStatusStore:
    def __init__(self, backend: PostgresStore) -> None:
        self.backend = backend

    async def get(self, assessment_id: str) -> PaymentStatus:
        flags = await self.backend.get_payment_flags(assessment_id) or {}
        return PaymentStatus(assessment_id=assessment_id, **flags)

    async def merge(self, assessment_id: str, **partial: bool) -> PaymentStatus:
        # Read-then-write without a lock; concurrent writers on one id race.
        current = await self.get(assessment_id)
        merged = current.model_copy(update={k: v for k, v in partial.items() if v is not None})
        await self.backend.write_payment_flags(assessment_id, {
            "has_paid_for_full_report": merged.has_paid_for_full_report,
            "has_paid_for_ebay_upgrade": merged.has_paid_for_ebay_upgrade,
        })
        return merged
