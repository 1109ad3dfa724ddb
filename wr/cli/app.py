from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from wr import __version__
from wr.core.errors import ErrorCode
from wr.core.result import Err
from wr.git.repository import Repository
from wr.output.console import ConsoleProtocol, RichConsole, Style
from wr.services.release.errors import ErrorCategory, ReleaseError
from wr.services.release.model import DeployOutcome, Environment, ReleaseBump
from wr.services.release.service import ReleaseRequest, run_release

app = typer.Typer(add_completion=False, rich_markup_mode="rich")

_EXIT_CODES: dict[ErrorCategory, ErrorCode] = {
    "precondition": ErrorCode.ENV_ERROR,
    "transport": ErrorCode.NETWORK_ERROR,
    "timeout": ErrorCode.DEPLOY_ERROR,
    "user": ErrorCode.CANCELLED,
}


def release_error_code(error: ReleaseError) -> ErrorCode:
    return _EXIT_CODES[error.category]


def _exit(error: ReleaseError, *, console: ConsoleProtocol) -> NoReturn:
    code = release_error_code(error)
    if code == ErrorCode.CANCELLED:
        console.warning(error.message)
    else:
        console.error(error.message)
        if error.hint:
            console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def build_console(*, verbose: bool) -> ConsoleProtocol:
    return RichConsole(verbose=verbose)


def _confirm(question: str) -> bool | None:
    try:
        return typer.confirm(question, default=False)
    except typer.Abort:
        return None


@app.command()
def release(
    environment: Environment = typer.Option(
        Environment.PRODUCTION,
        "--environment",
        "-e",
        case_sensitive=False,
        help="production (cut a release, push master+develop+tags) or staging (push develop)",
    ),
    semver_type: ReleaseBump = typer.Option(
        "patch", "--semver-type", "-s", help="major/minor/patch"
    ),
    deploy: bool = typer.Option(False, "--deploy", "-d", help="Play the GitLab deploy job"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Release even if there is nothing new to push"
    ),
    deploy_timeout: float | None = typer.Option(
        None,
        "--deploy-timeout",
        min=0,
        help="Stop waiting for the deploy job after this many seconds",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every step"),
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit."),
) -> None:
    """Cut a git-flow release and deploy it with GitLab CI."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    console = build_console(verbose=verbose)
    request = ReleaseRequest(
        environment=environment,
        bump=semver_type,
        deploy=deploy,
        force=force,
        deploy_timeout=deploy_timeout,
    )

    try:
        result = run_release(
            repo=Repository(Path.cwd()),
            request=request,
            console=console,
            confirm=_confirm,
        )
    except KeyboardInterrupt:
        _exit(ReleaseError(kind="user_aborted", message="Interrupted."), console=console)

    if isinstance(result, Err):
        _exit(result.error, console=console)

    summary = result.value
    if summary.version is not None:
        console.success(f"[Release] Released {summary.version}.")
    else:
        console.success(f"[Release] Pushed to {environment}.")

    if summary.outcome == DeployOutcome.FAILED:
        raise typer.Exit(code=int(ErrorCode.DEPLOY_ERROR))


def main() -> None:
    app()
