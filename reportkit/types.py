from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    pending = 'pending'
    skipped = 'skipped'
    rendering = 'rendering'
    completed = 'completed'
    failed = 'failed'


class ReportArtifacts(BaseModel):
    output_format: str | None = None
    output_path: str | None = None
    output_directory: str | None = None
    # extra pages opened through the report's sink factory
    pages: list[str] = Field(default_factory=list)


class ReportRunState(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    report_name: str
    output_name: str

    status: RunStatus = RunStatus.pending
    message: str = 'Report queued.'
    error: str | None = None
    external: bool = False
    locale: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    artifacts: ReportArtifacts = Field(default_factory=ReportArtifacts)
