from __future__ import annotations

from wr.core.result import Err, Ok, Result
from wr.git.credentials import CredentialProvider
from wr.git.repository import GitError, Repository, ref_by_branch, ref_by_tag
from wr.output.console import ConsoleProtocol
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError
from wr.services.release.model import Environment


def _push_error(what: str, remote: str, error: GitError) -> ReleaseError:
    return ReleaseError(
        kind="push_failed",
        message=f"failed to push {what} to {remote}",
        hint=error.message or None,
        cause=error,
    )


class ReleasePublisher:
    """Pushes a locally cut release to the remote.

    A failed push stops the run: nothing is retried, and tags are only pushed
    once both branches went through.
    """

    def __init__(
        self,
        *,
        repo: Repository,
        config: ReleaseConfig,
        credentials: CredentialProvider,
        console: ConsoleProtocol,
    ) -> None:
        self._repo = repo
        self._config = config
        self._credentials = credentials
        self._console = console

    def push(self, environment: Environment) -> Result[None, ReleaseError]:
        match environment:
            case Environment.STAGING:
                return self._push_branches((self._config.develop_branch,))
            case Environment.PRODUCTION:
                branches = self._push_branches(self._config.long_lived_branches)
                if isinstance(branches, Err):
                    return branches
                return self._push_tags()

    def _push_branches(self, branches: tuple[str, ...]) -> Result[None, ReleaseError]:
        remote = self._config.remote
        self._console.info(f"[Release] Pushing {', '.join(branches)} to {remote}.")
        result = self._repo.push(
            remote,
            [ref_by_branch(b) for b in branches],
            env=self._credentials.env(),
        )
        if isinstance(result, Err):
            return Err(_push_error(", ".join(branches), remote, result.error))
        return Ok(None)

    def _push_tags(self) -> Result[None, ReleaseError]:
        remote = self._config.remote
        tags = self._repo.tag_names()
        if isinstance(tags, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message="cannot list local tags",
                    hint=tags.error.message or None,
                    cause=tags.error,
                )
            )
        if not tags.value:
            return Ok(None)

        self._console.info(f"[Release] Pushing {len(tags.value)} tag(s) to {remote}.")
        result = self._repo.push(
            remote,
            [ref_by_tag(t) for t in tags.value],
            env=self._credentials.env(),
        )
        if isinstance(result, Err):
            return Err(_push_error("tags", remote, result.error))
        return Ok(None)
