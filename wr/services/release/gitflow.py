from __future__ import annotations

from collections.abc import Callable

from wr.core.result import Err, Ok, Result
from wr.git.repository import Repository
from wr.output.console import ConsoleProtocol
from wr.platform.process import run as run_process
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError
from wr.services.release.semver import SemVer
from wr.services.release.timeouts import GITFLOW_TIMEOUT_SECONDS

# Returns True to go on, False when declined, None when the prompt was dismissed.
ConfirmFn = Callable[[str], bool | None]


def _run_step(
    cmd: list[str],
    *,
    repo: Repository,
    config: ReleaseConfig,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    console.debug(" ".join(cmd))
    result = run_process(
        cmd,
        cwd=repo.path,
        env=config.gitflow_env(),
        timeout=GITFLOW_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="gitflow_failed",
                message=f"{' '.join(cmd[:4])} failed",
                hint=e.detail,
                cause=e,
            )
        )
    return Ok(None)


def cut_release(
    *,
    repo: Repository,
    config: ReleaseConfig,
    version: SemVer,
    console: ConsoleProtocol,
    confirm: ConfirmFn,
) -> Result[None, ReleaseError]:
    """Start and finish a git-flow release named after the version.

    The release is tagged and merged into both long-lived branches by
    git-flow; the integration branch is checked out again afterwards.
    """
    tag = version.to_tag()
    console.info(f"[Release] This will create release tag {tag}.")

    answer = confirm("Do you want to continue?")
    if answer is None:
        return Err(ReleaseError(kind="user_aborted", message="Aborting."))
    if not answer:
        return Err(ReleaseError(kind="user_cancelled", message="Cancelling."))

    console.info(f"[Release] Creating release {tag}.")
    steps = (
        ["git", "flow", "release", "start", tag],
        ["git", "flow", "release", "finish", "-m", tag, tag],
    )
    for cmd in steps:
        ok = _run_step(cmd, repo=repo, config=config, console=console)
        if isinstance(ok, Err):
            return ok

    checked_out = repo.checkout(config.develop_branch)
    if isinstance(checked_out, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message=f"cannot checkout {config.develop_branch}",
                hint=checked_out.error.message or None,
                cause=checked_out.error,
            )
        )
    return Ok(None)
