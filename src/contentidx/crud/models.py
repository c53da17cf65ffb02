"""Database table definitions for rebuild history"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class BuildStatusEnum(str, Enum):
    published = "published"
    unchanged = "unchanged"
    failed = "failed"


class BuildRun(SQLModel, table=True):
    """One rebuild attempt and its outcome, newest rows describe the live content"""
    __tablename__ = "build_runs"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    started_at: datetime = Field(..., sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    finished_at: datetime = Field(..., sa_column=Column(DateTime(timezone=True), nullable=False))
    status: BuildStatusEnum = Field(
        ..., sa_column=Column(SAEnum(BuildStatusEnum, native_enum=False, length=16), nullable=False),
    )
    digest: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    counts: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    errors: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
