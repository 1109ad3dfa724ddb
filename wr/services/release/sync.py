"""Relationship between the local branch and its upstream.

The classification compares three commits, local HEAD, upstream HEAD and
their merge-base (https://stackoverflow.com/a/3278427), after the tracked
branches have been fetched. It is recomputed on every call.
"""

from __future__ import annotations

from enum import Enum

from wr.core.result import Err, Ok, Result
from wr.git.credentials import CredentialProvider
from wr.git.repository import Repository
from wr.output.console import ConsoleProtocol
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError


class SyncStatus(Enum):
    UP_TO_DATE = "up_to_date"
    NEED_TO_PULL = "need_to_pull"
    NEED_TO_PUSH = "need_to_push"
    DIVERGED = "diverged"


def evaluate(local: str, remote: str, merge_base: str | None) -> SyncStatus:
    if local == remote:
        return SyncStatus.UP_TO_DATE
    if local == merge_base:
        return SyncStatus.NEED_TO_PULL
    if remote == merge_base:
        return SyncStatus.NEED_TO_PUSH
    return SyncStatus.DIVERGED


def gate(
    status: SyncStatus,
    *,
    force: bool,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Allow a release only when there is local work to push."""
    match status:
        case SyncStatus.NEED_TO_PUSH:
            return Ok(None)
        case SyncStatus.UP_TO_DATE:
            if force:
                console.info("[Setup] Repository is up-to-date, but force flag has been passed.")
                return Ok(None)
            return Err(
                ReleaseError(
                    kind="repo_up_to_date",
                    message="Repository is up-to-date, nothing to do.",
                    hint="Use --force to create a release anyway",
                )
            )
        case SyncStatus.NEED_TO_PULL:
            return Err(
                ReleaseError(
                    kind="repo_need_pull",
                    message="Repository need to be pulled first.",
                    hint="Run: git pull",
                )
            )
        case SyncStatus.DIVERGED:
            return Err(
                ReleaseError(
                    kind="repo_diverged",
                    message="Branch have diverged, please fix the conflict first.",
                    hint="Merge or rebase the branches, then run wr again",
                )
            )


def read_sync_status(
    *,
    repo: Repository,
    config: ReleaseConfig,
    credentials: CredentialProvider,
) -> Result[SyncStatus, ReleaseError]:
    """Fetch the long-lived branches, then classify the checked out branch."""
    fetched = repo.fetch(config.remote, config.long_lived_branches, env=credentials.env())
    if isinstance(fetched, Err):
        return Err(
            ReleaseError(
                kind="fetch_failed",
                message=f"failed to fetch from {config.remote}",
                hint=fetched.error.message or None,
                cause=fetched.error,
            )
        )

    local = repo.rev_parse("HEAD")
    if isinstance(local, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot resolve HEAD",
                hint=local.error.message or None,
                cause=local.error,
            )
        )

    remote = repo.rev_parse("@{u}")
    if isinstance(remote, Err):
        branch = repo.current_branch() or config.develop_branch
        return Err(upstream_not_configured(branch, cause=remote.error))

    base = repo.merge_base(local.value, remote.value)
    if isinstance(base, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot compute merge-base with upstream",
                hint=base.error.message or None,
                cause=base.error,
            )
        )

    return Ok(evaluate(local.value, remote.value, base.value))


def check_sync(
    *,
    repo: Repository,
    config: ReleaseConfig,
    credentials: CredentialProvider,
    console: ConsoleProtocol,
    force: bool,
) -> Result[SyncStatus, ReleaseError]:
    status = read_sync_status(repo=repo, config=config, credentials=credentials)
    if isinstance(status, Err):
        return status

    console.debug(f"[Setup] Sync status: {status.value.value}")
    gated = gate(status.value, force=force, console=console)
    if isinstance(gated, Err):
        return gated
    return status


def upstream_not_configured(branch: str, *, cause: object | None = None) -> ReleaseError:
    return ReleaseError(
        kind="upstream_not_configured",
        message="Upstream branches are not correctly defined.",
        hint=(
            f"Run: git checkout {branch} && "
            f"git branch --set-upstream-to=origin/{branch} {branch}"
        ),
        cause=cause,
    )
