"""End-to-end release flow.

Order of operations: tool checks, configuration, repository checks, then
(production only) version resolution and the git-flow release cut, the push,
and optionally the deployment. Any failure stops the flow before the next
step.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass

from wr.core.result import Err, Ok, Result
from wr.git.credentials import CredentialProvider, SshAgentCredentials
from wr.git.repository import Repository
from wr.output.console import ConsoleProtocol
from wr.platform.http import HttpClient, RealHttpClient
from wr.platform.signals import interrupt_sets
from wr.services.release.config import ReleaseConfig, load_release_config
from wr.services.release.deploy import DeploymentOrchestrator
from wr.services.release.errors import ReleaseError
from wr.services.release.gitflow import ConfirmFn, cut_release
from wr.services.release.gitlab import GitLabClient
from wr.services.release.model import DeployOutcome, Environment, ReleaseBump
from wr.services.release.preflight import check_repository, check_tools
from wr.services.release.publish import ReleasePublisher
from wr.services.release.semver import SemVer, next_version
from wr.services.release.timeouts import GITLAB_HTTP_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    environment: Environment = Environment.PRODUCTION
    bump: ReleaseBump = "patch"
    deploy: bool = False
    force: bool = False
    deploy_timeout: float | None = None


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    """What a run did: the version it cut and how the deployment ended."""

    version: SemVer | None = None
    outcome: DeployOutcome | None = None


def resolve_version(
    *, repo: Repository, bump: ReleaseBump, console: ConsoleProtocol
) -> Result[SemVer, ReleaseError]:
    tags = repo.tag_names()
    if isinstance(tags, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot list local tags",
                hint=tags.error.message or None,
                cause=tags.error,
            )
        )
    version = next_version(tags.value, bump)
    console.debug(f"[Release] Next {bump} version: {version}")
    return Ok(version)


def build_gitlab_client(
    config: ReleaseConfig, *, http: HttpClient | None = None
) -> Result[GitLabClient, ReleaseError]:
    if config.project is None:
        return Err(
            ReleaseError(
                kind="invalid_config",
                message="cannot find the GitLab project of this repository",
                hint='Check "git config remote.origin.url"',
            )
        )
    return Ok(
        GitLabClient(
            http=http or RealHttpClient(timeout=GITLAB_HTTP_TIMEOUT_SECONDS),
            host=config.gitlab_host,
            token=config.gitlab_token,
            project=config.project,
        )
    )


def run_release(
    *,
    repo: Repository,
    request: ReleaseRequest,
    console: ConsoleProtocol,
    confirm: ConfirmFn,
    credentials: CredentialProvider | None = None,
    http: HttpClient | None = None,
    env: Mapping[str, str] | None = None,
    cancel: threading.Event | None = None,
) -> Result[ReleaseSummary, ReleaseError]:
    creds = credentials or SshAgentCredentials(env)

    ok = check_tools(repo, console=console)
    if isinstance(ok, Err):
        return ok

    cfg = load_release_config(repo, env=env)
    if isinstance(cfg, Err):
        return cfg
    config = cfg.value

    checked = check_repository(
        repo=repo, config=config, credentials=creds, console=console, force=request.force
    )
    if isinstance(checked, Err):
        return checked

    # Resolve the GitLab project before mutating anything.
    gitlab: GitLabClient | None = None
    if request.deploy:
        client = build_gitlab_client(config, http=http)
        if isinstance(client, Err):
            return client
        gitlab = client.value

    version: SemVer | None = None
    if request.environment == Environment.PRODUCTION:
        resolved = resolve_version(repo=repo, bump=request.bump, console=console)
        if isinstance(resolved, Err):
            return resolved
        version = resolved.value

        cut = cut_release(
            repo=repo, config=config, version=version, console=console, confirm=confirm
        )
        if isinstance(cut, Err):
            return cut

    publisher = ReleasePublisher(repo=repo, config=config, credentials=creds, console=console)
    pushed = publisher.push(request.environment)
    if isinstance(pushed, Err):
        return pushed

    if gitlab is None:
        return Ok(ReleaseSummary(version=version))

    stop = cancel if cancel is not None else threading.Event()
    orchestrator = DeploymentOrchestrator(
        gitlab=gitlab,
        config=config,
        console=console,
        cancel=stop,
        timeout=request.deploy_timeout,
    )
    # Ctrl-C stops waiting on GitLab instead of killing the process.
    with interrupt_sets(stop):
        outcome = orchestrator.deploy(request.environment)
    if isinstance(outcome, Err):
        return outcome
    return Ok(ReleaseSummary(version=version, outcome=outcome.value))
