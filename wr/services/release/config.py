"""Release configuration.

Everything the release flow needs to know about the repository and the
GitLab instance is resolved once into a ReleaseConfig and passed to each
component. Sources (the environment wins over the file):

- git config: ``gitflow.branch.develop``, ``gitflow.branch.master`` and
  ``remote.origin.url`` (GitLab project path)
- environment: ``WR_GITLAB_HOST``/``WR_GITLAB_TOKEN``, then
  ``GITLAB_HOST``/``GITLAB_TOKEN``
- optional ``.wr.toml`` at the repository root::

    [gitlab]
    host = "gitlab.example.com"

    [deploy]
    production_job = "deploy_prod"
    staging_job = "deploy_staging"
    poll_interval = 1.0
    pipeline_lookup_attempts = 60
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from wr.core.result import Err, Ok, Result
from wr.core.structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table
from wr.git.repository import Repository
from wr.services.release.errors import ReleaseError
from wr.services.release.model import Environment
from wr.services.release.timeouts import PIPELINE_LOOKUP_ATTEMPTS, POLL_INTERVAL_SECONDS

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_GITLAB_HOST",
    "DeployJobs",
    "ReleaseConfig",
    "load_release_config",
    "project_path_from_remote_url",
]

CONFIG_FILE_NAME = ".wr.toml"
DEFAULT_GITLAB_HOST = "gitlab.com"
DEFAULT_REMOTE = "origin"

PRODUCTION_DEPLOY_JOB = "deploy_prod"
STAGING_DEPLOY_JOB = "deploy_staging"

_SCP_URL_RE = re.compile(r"^(?:[^@\s/]+@)?(?P<host>[^:\s/]+):(?P<path>[^\s]+?)(?:\.git)?/?$")
_URL_RE = re.compile(
    r"^(?:ssh|https?|git)://(?:[^@\s/]+@)?(?P<host>[^/\s]+)/(?P<path>[^\s]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class DeployJobs:
    """Name tokens identifying the deploy job of each environment."""

    production: str = PRODUCTION_DEPLOY_JOB
    staging: str = STAGING_DEPLOY_JOB


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    repo_root: Path
    develop_branch: str
    master_branch: str
    project: str | None
    gitlab_host: str = DEFAULT_GITLAB_HOST
    gitlab_token: str = ""
    remote: str = DEFAULT_REMOTE
    deploy_jobs: DeployJobs = field(default_factory=DeployJobs)
    poll_interval: float = POLL_INTERVAL_SECONDS
    pipeline_lookup_attempts: int = PIPELINE_LOOKUP_ATTEMPTS

    @property
    def long_lived_branches(self) -> tuple[str, str]:
        return (self.master_branch, self.develop_branch)

    def branch_for(self, environment: Environment) -> str:
        """Branch whose pipeline deploys the given environment."""
        match environment:
            case Environment.PRODUCTION:
                return self.master_branch
            case Environment.STAGING:
                return self.develop_branch

    def deploy_job_for(self, environment: Environment) -> str:
        match environment:
            case Environment.PRODUCTION:
                return self.deploy_jobs.production
            case Environment.STAGING:
                return self.deploy_jobs.staging

    def gitflow_env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment for git-flow: English output, no merge message editor."""
        env = dict(os.environ if base is None else base)
        env["LANG"] = "en_US.UTF-8"
        env["GIT_MERGE_AUTOEDIT"] = "no"
        return env


def project_path_from_remote_url(url: str) -> str | None:
    """Extract ``group/project`` from an ssh or http(s) remote URL."""
    s = url.strip()
    m = _URL_RE.match(s) or _SCP_URL_RE.match(s)
    if m is None:
        return None
    path = m.group("path").strip("/")
    return path or None


def _read_config_file(path: Path) -> Result[StrDict, ReleaseError]:
    if not path.exists():
        return Ok({})
    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(
            ReleaseError(
                kind="invalid_config",
                message=f"Invalid TOML syntax in {path.name}: {e}",
                hint=str(path),
            )
        )
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(
                kind="invalid_config",
                message=f"Cannot read {path.name}: {e}",
                hint=str(path),
            )
        )

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ReleaseError(kind="invalid_config", message="Config root must be a TOML table"))
    return Ok(data)


def _env_value(env: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return None


def load_release_config(
    repo: Repository,
    *,
    env: Mapping[str, str] | None = None,
) -> Result[ReleaseConfig, ReleaseError]:
    """Resolve the release configuration of a git-flow repository."""
    environ: Mapping[str, str] = os.environ if env is None else env

    develop = repo.config_get("gitflow.branch.develop")
    master = repo.config_get("gitflow.branch.master")
    if develop is None or master is None:
        return Err(
            ReleaseError(
                kind="gitflow_not_initialized",
                message="Repository is not initialized with git-flow",
                hint="Run: git flow init",
            )
        )

    file_result = _read_config_file(repo.path / CONFIG_FILE_NAME)
    if isinstance(file_result, Err):
        return file_result
    data = file_result.value
    gitlab: StrDict = get_table(data, "gitlab") or {}
    deploy: StrDict = get_table(data, "deploy") or {}

    remote_url = repo.remote_url(DEFAULT_REMOTE)
    project = project_path_from_remote_url(remote_url) if remote_url else None

    poll_interval = get_float(deploy, "poll_interval")
    if poll_interval is not None and poll_interval < 0:
        return Err(
            ReleaseError(kind="invalid_config", message="deploy.poll_interval must be >= 0")
        )
    attempts = get_int(deploy, "pipeline_lookup_attempts")
    if attempts is not None and attempts < 1:
        return Err(
            ReleaseError(
                kind="invalid_config",
                message="deploy.pipeline_lookup_attempts must be >= 1",
            )
        )

    return Ok(
        ReleaseConfig(
            repo_root=repo.path,
            develop_branch=develop,
            master_branch=master,
            project=project,
            gitlab_host=_env_value(environ, "WR_GITLAB_HOST", "GITLAB_HOST")
            or get_str(gitlab, "host")
            or DEFAULT_GITLAB_HOST,
            gitlab_token=_env_value(environ, "WR_GITLAB_TOKEN", "GITLAB_TOKEN") or "",
            deploy_jobs=DeployJobs(
                production=get_str(deploy, "production_job") or PRODUCTION_DEPLOY_JOB,
                staging=get_str(deploy, "staging_job") or STAGING_DEPLOY_JOB,
            ),
            poll_interval=POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval,
            pipeline_lookup_attempts=attempts or PIPELINE_LOOKUP_ATTEMPTS,
        )
    )
