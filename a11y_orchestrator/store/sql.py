"""SQL result store backed by SQLAlchemy's asyncio extension."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Self

from sqlalchemy import DateTime, Index, String, Text, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from a11y_orchestrator.models.report import ComplianceReport
from a11y_orchestrator.models.result import PageResult
from a11y_orchestrator.store.base import ResultExistsError, ResultStore

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class PageResultRow(Base):
    """Stored page result; the full result is kept as JSON in ``payload``."""

    __tablename__ = "page_results"
    __table_args__ = (Index("ix_page_results_batch_id", "batch_id"),)

    batch_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    job_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    test_type: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)


class ComplianceReportRow(Base):
    """Latest compliance report of a batch."""

    __tablename__ = "compliance_reports"

    batch_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    payload: Mapped[str] = mapped_column(Text, nullable=False)


@dataclass(frozen=True, kw_only=True)
class SqlResultStore(ResultStore):
    """Stores results in any database with an async SQLAlchemy driver."""

    engine: AsyncEngine = field(repr=False)
    session_factory: async_sessionmaker[AsyncSession] = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_url(cls, database_url: str) -> AsyncGenerator[Self, None]:
        """Connect to ``database_url``, create missing tables and dispose on exit."""
        engine = create_async_engine(database_url, echo=False, future=True)
        try:
            async with engine.begin() as connection:
                await connection.run_sync(Base.metadata.create_all)
            log.info("Result store ready: %s", engine.url.render_as_string())
            yield cls(
                engine=engine,
                session_factory=async_sessionmaker(
                    engine, expire_on_commit=False, autoflush=False
                ),
            )
        finally:
            await engine.dispose()

    async def save_page_result(self, result: PageResult) -> None:
        row = PageResultRow(
            batch_id=result.batch_id,
            job_id=result.job_id,
            url=result.url,
            test_type=result.test_type,
            timestamp=result.timestamp,
            payload=result.model_dump_json(),
        )
        async with self.session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                raise ResultExistsError(result.batch_id, result.job_id) from e

    async def get_page_result(self, batch_id: str, job_id: str) -> PageResult | None:
        async with self.session_factory() as session:
            row = await session.get(PageResultRow, (batch_id, job_id))
        return PageResult.model_validate_json(row.payload) if row else None

    async def list_page_results(self, batch_id: str) -> Sequence[PageResult]:
        statement = (
            select(PageResultRow.payload)
            .where(PageResultRow.batch_id == batch_id)
            .order_by(PageResultRow.timestamp, PageResultRow.job_id)
        )
        async with self.session_factory() as session:
            payloads = (await session.scalars(statement)).all()
        return [PageResult.model_validate_json(payload) for payload in payloads]

    async def save_report(self, report: ComplianceReport) -> None:
        row = ComplianceReportRow(
            batch_id=report.batch_id,
            generated_at=report.generated_at,
            payload=report.model_dump_json(),
        )
        async with self.session_factory() as session:
            await session.merge(row)
            await session.commit()

    async def get_report(self, batch_id: str) -> ComplianceReport | None:
        async with self.session_factory() as session:
            row = await session.get(ComplianceReportRow, batch_id)
        return ComplianceReport.model_validate_json(row.payload) if row else None
