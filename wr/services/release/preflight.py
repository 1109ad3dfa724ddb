"""Checks that must pass before anything is mutated.

Tool checks run before the configuration is loaded (it is read from the
git-flow settings); repository checks run after.
"""

from __future__ import annotations

import shutil

from wr.core.result import Err, Ok, Result
from wr.git.credentials import CredentialProvider
from wr.git.repository import Repository
from wr.output.console import ConsoleProtocol
from wr.platform.process import run as run_process
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError
from wr.services.release.sync import SyncStatus, check_sync, upstream_not_configured
from wr.services.release.timeouts import GIT_FLOW_CHECK_TIMEOUT_SECONDS

GITFLOW_AVH_IDENTIFIER = "AVH"
GITLAB_CI_FILE = ".gitlab-ci.yml"


def ensure_git_available() -> Result[None, ReleaseError]:
    if shutil.which("git") is None:
        return Err(
            ReleaseError(
                kind="git_missing",
                message='"git" not found. Please install git.',
                hint="macOS: brew install git; Ubuntu: sudo apt install git",
            )
        )
    return Ok(None)


def ensure_git_repository(repo: Repository) -> Result[None, ReleaseError]:
    if not repo.exists():
        return Err(
            ReleaseError(
                kind="not_git_repository",
                message="Please launch wr in a git repository.",
                hint=str(repo.path),
            )
        )
    return Ok(None)


def ensure_gitflow(repo: Repository) -> Result[None, ReleaseError]:
    """git-flow must be installed, and be the AVH edition."""
    result = run_process(
        ["git", "flow", "version"], cwd=repo.path, timeout=GIT_FLOW_CHECK_TIMEOUT_SECONDS
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gitflow_missing",
                message='"git-flow" not found. Please install git-flow.',
                hint="macOS: brew install git-flow-avh; Ubuntu: sudo apt install git-flow",
                cause=result.error,
            )
        )
    if GITFLOW_AVH_IDENTIFIER not in result.value:
        return Err(
            ReleaseError(
                kind="gitflow_wrong_version",
                message="You have the wrong version of git flow installed.",
                hint="Uninstall it and install git-flow-avh instead",
            )
        )
    return Ok(None)


def ensure_gitflow_initialized(repo: Repository) -> Result[None, ReleaseError]:
    result = run_process(
        ["git", "flow", "config"], cwd=repo.path, timeout=GIT_FLOW_CHECK_TIMEOUT_SECONDS
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gitflow_not_initialized",
                message="Repository is not initialized with git-flow",
                hint="Run: git flow init",
                cause=result.error,
            )
        )
    return Ok(None)


def check_tools(repo: Repository, *, console: ConsoleProtocol) -> Result[None, ReleaseError]:
    console.debug("[Setup] Checking for git.")
    ok = ensure_git_available()
    if isinstance(ok, Err):
        return ok

    ok = ensure_git_repository(repo)
    if isinstance(ok, Err):
        return ok

    console.debug("[Setup] Checking for git-flow.")
    ok = ensure_gitflow(repo)
    if isinstance(ok, Err):
        return ok

    console.debug("[Setup] Checking if the repository has git-flow initialized.")
    return ensure_gitflow_initialized(repo)


def ensure_on_branch(repo: Repository, branch: str) -> Result[None, ReleaseError]:
    if repo.current_branch() != branch:
        return Err(
            ReleaseError(
                kind="wrong_branch",
                message=f"Please checkout the {branch} branch",
                hint=f"Run: git checkout {branch}",
            )
        )
    return Ok(None)


def ensure_upstreams(repo: Repository, branches: tuple[str, ...]) -> Result[None, ReleaseError]:
    for branch in branches:
        if not repo.has_upstream(branch):
            return Err(upstream_not_configured(branch))
    return Ok(None)


def ensure_clean(repo: Repository) -> Result[None, ReleaseError]:
    clean = repo.is_clean()
    if isinstance(clean, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot read repository status",
                hint=clean.error.message or None,
                cause=clean.error,
            )
        )
    if not clean.value:
        return Err(
            ReleaseError(
                kind="repo_dirty",
                message="Repository is dirty. Please commit or stash your last changes.",
                hint="git add . && git commit, or: git stash",
            )
        )
    return Ok(None)


def check_repository(
    *,
    repo: Repository,
    config: ReleaseConfig,
    credentials: CredentialProvider,
    console: ConsoleProtocol,
    force: bool,
) -> Result[SyncStatus, ReleaseError]:
    """Branch, upstream, cleanliness and sync checks, in that order."""
    console.debug(f"[Setup] Checking if the repository is on the {config.develop_branch} branch.")
    ok = ensure_on_branch(repo, config.develop_branch)
    if isinstance(ok, Err):
        return ok

    console.debug("[Setup] Checking if upstreams are defined.")
    ok = ensure_upstreams(repo, config.long_lived_branches)
    if isinstance(ok, Err):
        return ok

    console.debug("[Setup] Checking if repository is clean.")
    ok = ensure_clean(repo)
    if isinstance(ok, Err):
        return ok

    if not credentials.available():
        console.debug("[Setup] No ssh-agent found (SSH_AUTH_SOCK unset).")

    console.debug("[Setup] Checking if the repository is up-to-date with origin.")
    status = check_sync(
        repo=repo, config=config, credentials=credentials, console=console, force=force
    )
    if isinstance(status, Err):
        return status

    if (repo.path / GITLAB_CI_FILE).exists():
        console.debug(f"[Setup] {GITLAB_CI_FILE} found")
    else:
        console.warning(f"[Setup] {GITLAB_CI_FILE} not found")

    return status
