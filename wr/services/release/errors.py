"""Error type for the release flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # precondition
    "git_missing",
    "gitflow_missing",
    "gitflow_wrong_version",
    "gitflow_not_initialized",
    "not_git_repository",
    "wrong_branch",
    "upstream_not_configured",
    "repo_dirty",
    "repo_up_to_date",
    "repo_need_pull",
    "repo_diverged",
    "invalid_config",
    # transport
    "git_failed",
    "fetch_failed",
    "push_failed",
    "gitflow_failed",
    "gitlab_failed",
    # timeout
    "pipeline_not_found",
    "deploy_timeout",
    # user
    "user_cancelled",
    "user_aborted",
    "deploy_cancelled",
]

ErrorCategory = Literal["precondition", "transport", "timeout", "user"]

_CATEGORIES: dict[str, ErrorCategory] = {
    "git_failed": "transport",
    "fetch_failed": "transport",
    "push_failed": "transport",
    "gitflow_failed": "transport",
    "gitlab_failed": "transport",
    "pipeline_not_found": "timeout",
    "deploy_timeout": "timeout",
    "user_cancelled": "user",
    "user_aborted": "user",
    "deploy_cancelled": "user",
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A release failure.

    Attributes:
        kind: Stable identifier of the failure.
        message: One-line description.
        hint: What the user can do about it.
        cause: Underlying failure (ProcessError, GitError, HttpError), if any.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    cause: object | None = None

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES.get(self.kind, "precondition")

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
