"""Git repository abstraction.

Thin wrapper around the git CLI for the operations a release needs:
reading tags and revisions, fetching and pushing refs, and inspecting the
working tree. All operations that can fail return Result types.

Usage:
    repo = Repository(Path.cwd())

    match repo.rev_parse("@{u}"):
        case Ok(sha):
            print(f"upstream at {sha}")
        case Err(e):
            print(f"no upstream: {e.message}")
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from wr.core.result import Err, Ok, Result
from wr.platform.process import ProcessError
from wr.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
    "ref_by_branch",
    "ref_by_tag",
]


def ref_by_branch(branch: str) -> str:
    """Refspec mapping a local branch onto the same remote branch."""
    return f"refs/heads/{branch}:refs/heads/{branch}"


def ref_by_tag(tag: str) -> str:
    """Refspec mapping a local tag onto the same remote tag."""
    return f"refs/tags/{tag}:refs/tags/{tag}"


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
        process: The underlying process failure, when there is one
    """

    command: str
    message: str
    returncode: int = 1
    process: ProcessError | None = None


class Repository:
    """A local git clone.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if path is inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def is_clean(self) -> Result[bool, GitError]:
        """True when there are no staged, unstaged or untracked changes."""
        result = self._run(["status", "--porcelain", "--untracked-files=all"])
        match result:
            case Err(e):
                return Err(_git_error("status", e))
            case Ok(stdout):
                return Ok(stdout.strip() == "")

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error.

        Works on an unborn branch too.
        """
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def rev_parse(self, spec: str) -> Result[str, GitError]:
        """Resolve a revision spec (``HEAD``, ``@{u}``, ``develop@{u}``) to a sha."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{spec}^{{commit}}"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=f"rev-parse {spec}",
                        message=e.stderr.strip() or f"cannot resolve {spec}",
                        returncode=e.returncode,
                        process=e,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def has_upstream(self, branch: str) -> bool:
        """Check if a local branch has an upstream configured."""
        return isinstance(self.rev_parse(f"{branch}@{{u}}"), Ok)

    def merge_base(self, left: str, right: str) -> Result[str | None, GitError]:
        """Best common ancestor of two commits, None if histories are unrelated."""
        result = self._run(["merge-base", left, right])
        match result:
            case Err(e):
                # Exit 1 without output means "no common ancestor".
                if e.returncode == 1 and not e.stderr.strip():
                    return Ok(None)
                return Err(_git_error("merge-base", e))
            case Ok(stdout):
                return Ok(stdout.strip() or None)

    def tag_names(self) -> Result[list[str], GitError]:
        result = self._run(["tag", "--list"])
        match result:
            case Err(e):
                return Err(_git_error("tag", e))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def config_get(self, key: str) -> str | None:
        """Read a git config value, None if unset."""
        result = self._run(["config", "--get", key])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def remote_url(self, remote: str) -> str | None:
        return self.config_get(f"remote.{remote}.url")

    def checkout(self, branch: str) -> Result[str, GitError]:
        result = self._run(["checkout", branch])
        match result:
            case Err(e):
                return Err(_git_error("checkout", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def fetch(
        self,
        remote: str,
        refspecs: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, GitError]:
        """Fetch the given refs and every tag from a remote."""
        result = self._run(["fetch", "--tags", remote, *refspecs], env=env)
        match result:
            case Err(e):
                return Err(_git_error("fetch", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def push(
        self,
        remote: str,
        refspecs: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, GitError]:
        result = self._run(["push", remote, *refspecs], env=env)
        match result:
            case Err(e):
                return Err(_git_error("push", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(
        self,
        args: list[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, env=env, timeout=timeout
        )


def _git_error(command: str, e: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
        returncode=e.returncode,
        process=e,
    )
