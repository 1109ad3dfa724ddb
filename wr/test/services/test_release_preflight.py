from __future__ import annotations

import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from wr.core.result import Err, Ok, Result
from wr.git.repository import GitError
from wr.output.console import MockConsole
from wr.platform.process import ProcessError
from wr.services.release import preflight as preflight_mod
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError
from wr.services.release.sync import SyncStatus
from wr.services.release.timeouts import GIT_FLOW_CHECK_TIMEOUT_SECONDS

AVH_VERSION = "1.12.3 (AVH Edition)\n"


class FakeCredentials:
    def __init__(self, *, agent: bool = True) -> None:
        self.agent = agent

    def env(self) -> dict[str, str]:
        return {}

    def available(self) -> bool:
        return self.agent


class FakeRepo:
    def __init__(
        self,
        path: Path,
        *,
        exists: bool = True,
        branch: str | None = "develop",
        upstreams: tuple[str, ...] = ("master", "develop"),
        clean: bool = True,
        head: str = "local",
        upstream: str = "remote",
        base: str = "remote",
    ) -> None:
        self.path = path
        self._exists = exists
        self._branch = branch
        self._upstreams = upstreams
        self._clean = clean
        self._shas = {"HEAD": head, "@{u}": upstream}
        self._base = base

    def exists(self) -> bool:
        return self._exists

    def current_branch(self) -> str | None:
        return self._branch

    def has_upstream(self, branch: str) -> bool:
        return branch in self._upstreams

    def is_clean(self) -> Result[bool, GitError]:
        return Ok(self._clean)

    def fetch(
        self, remote: str, refspecs: Sequence[str], *, env: Mapping[str, str] | None = None
    ) -> Result[str, GitError]:
        return Ok("")

    def rev_parse(self, spec: str) -> Result[str, GitError]:
        return Ok(self._shas[spec])

    def merge_base(self, left: str, right: str) -> Result[str | None, GitError]:
        return Ok(self._base)


def _config(path: Path) -> ReleaseConfig:
    return ReleaseConfig(
        repo_root=path, develop_branch="develop", master_branch="master", project="a/b"
    )


def _fake_gitflow(version: str | None = AVH_VERSION, *, initialized: bool = True):
    def fake_run(
        cmd: list[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        if cmd == ["git", "flow", "version"]:
            if version is None:
                return Err(ProcessError(tuple(cmd), 1, "", "git: 'flow' is not a git command."))
            return Ok(version)
        if cmd == ["git", "flow", "config"]:
            if not initialized:
                return Err(ProcessError(tuple(cmd), 1, "", "Not a gitflow-enabled repo yet."))
            return Ok("Branch name for production releases: master\n")
        raise AssertionError(f"unexpected command: {cmd}")

    return fake_run


def _check_tools(repo: FakeRepo, console: MockConsole) -> Result[None, ReleaseError]:
    return preflight_mod.check_tools(repo, console=console)  # type: ignore[arg-type]


@pytest.fixture
def git_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")


class TestCheckTools:
    def test_all_present(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, git_on_path: None
    ) -> None:
        monkeypatch.setattr(preflight_mod, "run_process", _fake_gitflow())
        console = MockConsole()
        result = _check_tools(FakeRepo(tmp_path), console)
        assert result == Ok(None)
        assert console.find("[Setup] Checking for git-flow.")

    def test_gitflow_checks_use_check_timeout(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, git_on_path: None
    ) -> None:
        inner = _fake_gitflow()
        timeouts: list[float | None] = []

        def recording_run(
            cmd: list[str],
            cwd: Path,
            env: Mapping[str, str] | None = None,
            *,
            timeout: float | None = None,
        ) -> Result[str, ProcessError]:
            timeouts.append(timeout)
            return inner(cmd, cwd, env, timeout=timeout)

        monkeypatch.setattr(preflight_mod, "run_process", recording_run)
        assert _check_tools(FakeRepo(tmp_path), MockConsole()) == Ok(None)
        assert timeouts == [GIT_FLOW_CHECK_TIMEOUT_SECONDS, GIT_FLOW_CHECK_TIMEOUT_SECONDS]

    def test_git_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(shutil, "which", lambda name: None)
        result = _check_tools(FakeRepo(tmp_path), MockConsole())
        assert isinstance(result, Err)
        assert result.error.kind == "git_missing"

    def test_not_a_repository(self, tmp_path: Path, git_on_path: None) -> None:
        repo = FakeRepo(tmp_path, exists=False)
        result = _check_tools(repo, MockConsole())
        assert isinstance(result, Err)
        assert result.error.kind == "not_git_repository"

    @pytest.mark.parametrize(
        ("version", "initialized", "kind"),
        [
            (None, True, "gitflow_missing"),
            ("0.4.1\n", True, "gitflow_wrong_version"),
            (AVH_VERSION, False, "gitflow_not_initialized"),
        ],
    )
    def test_gitflow_problems(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        git_on_path: None,
        version: str | None,
        initialized: bool,
        kind: str,
    ) -> None:
        monkeypatch.setattr(
            preflight_mod, "run_process", _fake_gitflow(version, initialized=initialized)
        )
        result = _check_tools(FakeRepo(tmp_path), MockConsole())
        assert isinstance(result, Err)
        assert result.error.kind == kind
        assert result.error.category == "precondition"


class TestCheckRepository:
    def _check(self, repo: FakeRepo, *, force: bool = False, agent: bool = True):
        console = MockConsole()
        result = preflight_mod.check_repository(
            repo=repo,  # type: ignore[arg-type]
            config=_config(repo.path),
            credentials=FakeCredentials(agent=agent),
            console=console,
            force=force,
        )
        return result, console

    def test_ready_to_release(self, tmp_path: Path) -> None:
        (tmp_path / ".gitlab-ci.yml").write_text("stages: []\n", encoding="utf-8")
        result, console = self._check(FakeRepo(tmp_path))
        assert result == Ok(SyncStatus.NEED_TO_PUSH)
        assert not console.has_warning()

    def test_missing_ci_file_is_a_warning(self, tmp_path: Path) -> None:
        result, console = self._check(FakeRepo(tmp_path))
        assert isinstance(result, Ok)
        assert console.find("warning: [Setup] .gitlab-ci.yml not found")

    def test_wrong_branch(self, tmp_path: Path) -> None:
        result, _ = self._check(FakeRepo(tmp_path, branch="feature/x"))
        assert isinstance(result, Err)
        assert result.error.kind == "wrong_branch"
        assert result.error.message == "Please checkout the develop branch"

    def test_missing_upstream(self, tmp_path: Path) -> None:
        result, _ = self._check(FakeRepo(tmp_path, upstreams=("develop",)))
        assert isinstance(result, Err)
        assert result.error.kind == "upstream_not_configured"
        assert "master" in (result.error.hint or "")

    def test_dirty(self, tmp_path: Path) -> None:
        result, _ = self._check(FakeRepo(tmp_path, clean=False))
        assert isinstance(result, Err)
        assert result.error.kind == "repo_dirty"

    def test_up_to_date_needs_force(self, tmp_path: Path) -> None:
        repo = FakeRepo(tmp_path, head="same", upstream="same", base="same")
        result, _ = self._check(repo)
        assert isinstance(result, Err)
        assert result.error.kind == "repo_up_to_date"

        forced, _ = self._check(repo, force=True)
        assert forced == Ok(SyncStatus.UP_TO_DATE)

    def test_no_agent_is_reported(self, tmp_path: Path) -> None:
        _, console = self._check(FakeRepo(tmp_path), agent=False)
        assert console.find("No ssh-agent found")
