"""Drive the deploy job of the pipeline created by a release push.

Pipeline creation on GitLab is asynchronous relative to the push, so the
pipeline is looked up a bounded number of times. Once its deploy job is
known, the job is waited for while it is queued behind earlier jobs
(``created``), played, then followed until it succeeds or fails. Those two
waits have no bound of their own; a caller can stop them with the cancel
event or an overall timeout.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from time import monotonic, sleep

from wr.core.result import Err, Ok, Result
from wr.output.console import ConsoleProtocol
from wr.services.release.config import ReleaseConfig
from wr.services.release.errors import ReleaseError
from wr.services.release.gitlab import GitLabClient
from wr.services.release.model import DeployOutcome, Environment, Job, JobStatus

# A pipeline skipped by duplicate-commit rules still carries the deploy job.
_MATCHING_PIPELINE_STATUSES = frozenset({"running", "skipped"})

_DONE_STATUSES = frozenset({JobStatus.SUCCESS, JobStatus.FAILED})


def select_deploy_job(jobs: Sequence[Job], token: str) -> Job | None:
    """First job, in service order, named after the token and not yet done."""
    for job in jobs:
        if token in job.name and job.status not in _DONE_STATUSES:
            return job
    return None


class DeploymentOrchestrator:
    """Runs one deployment.

    Args:
        gitlab: API client for the project.
        config: Release configuration.
        console: Progress output.
        cancel: Set from elsewhere (e.g. a signal handler) to stop polling.
        timeout: Overall limit in seconds for one deploy() call, None for none.
    """

    def __init__(
        self,
        *,
        gitlab: GitLabClient,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> None:
        self._gitlab = gitlab
        self._config = config
        self._console = console
        self._cancel = cancel
        self._timeout = timeout
        self._deadline: float | None = None

    def deploy(self, environment: Environment) -> Result[DeployOutcome, ReleaseError]:
        self._deadline = None if self._timeout is None else monotonic() + self._timeout

        self._console.info("[Deploy] Fetching latest pipeline.")
        pipeline_id = self.find_pipeline(self._config.branch_for(environment))
        if isinstance(pipeline_id, Err):
            return pipeline_id
        self._console.debug(f"[Deploy] Using pipeline {pipeline_id.value}.")

        jobs = self._gitlab.pipeline_jobs(pipeline_id.value)
        if isinstance(jobs, Err):
            return jobs

        token = self._config.deploy_job_for(environment)
        job = select_deploy_job(jobs.value, token)
        if job is None:
            self._console.warning(f'[Deploy] No pending "{token}" job found, nothing to deploy.')
            return Ok(DeployOutcome.NO_JOB)

        self._console.info("[Deploy] Waiting for previous jobs to be over.")
        waited = self._wait_while(job, lambda status: status == JobStatus.CREATED)
        if isinstance(waited, Err):
            return waited

        played = self._gitlab.play_job(job.id)
        if isinstance(played, Err):
            return played
        self._console.info(f'[Deploy] Playing "{job.name}" job.')

        current = self._gitlab.get_job(job.id)
        if isinstance(current, Err):
            return current
        final = self._wait_while(current.value, lambda status: status not in _DONE_STATUSES)
        if isinstance(final, Err):
            return final

        if final.value.status == JobStatus.FAILED:
            self._console.error(f'[Deploy] "{final.value.name}" job failed')
            return Ok(DeployOutcome.FAILED)
        self._console.success(f'[Deploy] "{final.value.name}" job succeeded')
        return Ok(DeployOutcome.SUCCESS)

    def find_pipeline(self, ref: str) -> Result[int, ReleaseError]:
        attempts = self._config.pipeline_lookup_attempts
        for _ in range(attempts):
            interrupted = self._interrupted()
            if interrupted is not None:
                return Err(interrupted)
            sleep(self._config.poll_interval)

            pipelines = self._gitlab.list_pipelines(ref=ref)
            if isinstance(pipelines, Err):
                return pipelines
            for pipeline in pipelines.value:
                if pipeline.status in _MATCHING_PIPELINE_STATUSES:
                    return Ok(pipeline.id)

        return Err(
            ReleaseError(
                kind="pipeline_not_found",
                message="[Deploy] Pipeline was not found, aborting.",
                hint=(
                    f"no running pipeline for {ref} after {attempts} attempts; "
                    "check the project's .gitlab-ci.yml"
                ),
            )
        )

    def _wait_while(
        self,
        job: Job,
        pending: Callable[[JobStatus], bool],
    ) -> Result[Job, ReleaseError]:
        current = job
        while pending(current.status):
            interrupted = self._interrupted()
            if interrupted is not None:
                return Err(interrupted)
            sleep(self._config.poll_interval)

            refreshed = self._gitlab.get_job(current.id)
            if isinstance(refreshed, Err):
                return refreshed
            job_now = refreshed.value
            if job_now.status != current.status:
                self._console.debug(f'[Deploy] "{job_now.name}" is {job_now.status.value}.')
                if job_now.status.is_terminal and pending(job_now.status):
                    self._console.warning(
                        f'[Deploy] "{job_now.name}" ended as {job_now.status.value}; '
                        "waiting for it to be retried."
                    )
            current = job_now
        return Ok(current)

    def _interrupted(self) -> ReleaseError | None:
        if self._cancel is not None and self._cancel.is_set():
            return ReleaseError(kind="deploy_cancelled", message="[Deploy] Cancelled.")
        if self._deadline is not None and monotonic() >= self._deadline:
            return ReleaseError(
                kind="deploy_timeout",
                message=f"[Deploy] Gave up after {self._timeout:g}s.",
                hint="The job keeps running on GitLab; follow it there.",
            )
        return None
