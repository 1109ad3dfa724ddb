from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal


ReleaseBump = Literal["major", "minor", "patch"]


class Environment(Enum):
    PRODUCTION = "production"
    STAGING = "staging"

    def __str__(self) -> str:
        return self.value


class JobStatus(Enum):
    """GitLab job states."""

    CREATED = "created"
    WAITING_FOR_RESOURCE = "waiting_for_resource"
    PREPARING = "preparing"
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELED = "canceled"
    SKIPPED = "skipped"
    MANUAL = "manual"
    SCHEDULED = "scheduled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_JOB_STATUSES


_TERMINAL_JOB_STATUSES = frozenset(
    {JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.CANCELED, JobStatus.SKIPPED}
)


class DeployOutcome(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    NO_JOB = "no_job"


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Snapshot of a GitLab pipeline."""

    id: int
    status: str  # free-form: "running", "skipped", "success", ...
    ref: str
    sha: str
    web_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Job:
    id: int
    name: str
    status: JobStatus
