"""
Data models for the workflow runtime.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel
from sqlmodel import Field, SQLModel


class WorkflowStatus(str, Enum):
    """Lifecycle of a workflow instance."""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETE = "complete"
    ERRORED = "errored"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkflowInstance(SQLModel, table=True):
    """One run of a named workflow."""
    __tablename__ = "workflow_instances"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    workflow: str = Field(index=True)
    status: str = Field(default=WorkflowStatus.QUEUED.value)
    output: Optional[str] = None  # JSON
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class WorkflowStepRecord(SQLModel, table=True):
    """Stored result of a completed step; replays return it instead of re-running."""
    __tablename__ = "workflow_steps"

    id: Optional[int] = Field(default=None, primary_key=True)
    instance_id: str = Field(index=True, foreign_key="workflow_instances.id")
    name: str
    output: str  # JSON
    attempts: int = 1
    completed_at: datetime = Field(default_factory=_utcnow)


class StepView(BaseModel):
    name: str
    attempts: int
    completed_at: datetime


class InstanceView(BaseModel):
    """Status of a workflow instance as returned over HTTP."""
    id: str
    workflow: str
    status: WorkflowStatus
    output: Optional[Any] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    steps: List[StepView] = []
