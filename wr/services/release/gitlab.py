from __future__ import annotations

from datetime import datetime
from urllib.parse import quote, urlencode

from wr.core.result import Err, Ok, Result
from wr.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str
from wr.platform.http import HttpClient, HttpError
from wr.services.release.errors import ReleaseError
from wr.services.release.model import Job, JobStatus, Pipeline


def _api_error(message: str, error: HttpError) -> ReleaseError:
    hint = str(error)
    if error.status in {401, 403}:
        hint = f"{error}; check WR_GITLAB_TOKEN and its api scope"
    return ReleaseError(kind="gitlab_failed", message=message, hint=hint, cause=error)


def _payload_error(message: str, endpoint: str) -> ReleaseError:
    return ReleaseError(kind="gitlab_failed", message=message, hint=endpoint)


def _parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_pipeline(data: StrDict) -> Pipeline | None:
    pipeline_id = get_int(data, "id")
    status = get_str(data, "status")
    if pipeline_id is None or status is None:
        return None
    return Pipeline(
        id=pipeline_id,
        status=status,
        ref=get_str(data, "ref") or "",
        sha=get_str(data, "sha") or "",
        web_url=get_str(data, "web_url"),
        created_at=_parse_datetime(get_str(data, "created_at")),
        updated_at=_parse_datetime(get_str(data, "updated_at")),
    )


def parse_job(data: StrDict) -> Job | None:
    job_id = get_int(data, "id")
    name = get_str(data, "name")
    status_raw = get_str(data, "status")
    if job_id is None or name is None or status_raw is None:
        return None
    try:
        status = JobStatus(status_raw)
    except ValueError:
        return None
    return Job(id=job_id, name=name, status=status)


class GitLabClient:
    """GitLab REST API (v4) calls used by a deployment.

    Attributes:
        base_url: API root, e.g. https://gitlab.com/api/v4
        project: Project path (group/project)
    """

    def __init__(self, *, http: HttpClient, host: str, token: str, project: str) -> None:
        self._http = http
        self._token = token
        root = host.rstrip("/")
        if not root.startswith(("http://", "https://")):
            root = f"https://{root}"
        self.base_url = f"{root}/api/v4"
        self.project = project

    def project_url(self, path: str) -> str:
        return f"{self.base_url}/projects/{quote(self.project, safe='')}/{path}"

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"PRIVATE-TOKEN": self._token}

    def _get(self, path: str, message: str) -> Result[object, ReleaseError]:
        result = self._http.request_json("GET", self.project_url(path), headers=self._headers())
        if isinstance(result, Err):
            return Err(_api_error(message, result.error))
        return Ok(result.value)

    def list_pipelines(self, *, ref: str) -> Result[list[Pipeline], ReleaseError]:
        """Pipelines of a ref, most recent (highest id) first."""
        query = urlencode({"ref": ref, "order_by": "id", "sort": "desc"})
        endpoint = f"pipelines?{query}"
        obj = self._get(endpoint, f"failed to list pipelines for {ref}")
        if isinstance(obj, Err):
            return obj

        raw = as_obj_list(obj.value)
        if raw is None:
            return Err(_payload_error("unexpected pipelines payload", endpoint))

        out: list[Pipeline] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            pipeline = parse_pipeline(d)
            if pipeline is not None:
                out.append(pipeline)
        return Ok(out)

    def pipeline_jobs(self, pipeline_id: int) -> Result[list[Job], ReleaseError]:
        endpoint = f"pipelines/{pipeline_id}/jobs?per_page=100"
        obj = self._get(endpoint, f"failed to list jobs of pipeline {pipeline_id}")
        if isinstance(obj, Err):
            return obj

        raw = as_obj_list(obj.value)
        if raw is None:
            return Err(_payload_error("unexpected jobs payload", endpoint))

        out: list[Job] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            job = parse_job(d)
            if job is not None:
                out.append(job)
        return Ok(out)

    def get_job(self, job_id: int) -> Result[Job, ReleaseError]:
        endpoint = f"jobs/{job_id}"
        obj = self._get(endpoint, f"failed to fetch job {job_id}")
        if isinstance(obj, Err):
            return obj

        d = as_str_dict(obj.value)
        job = parse_job(d) if d is not None else None
        if job is None:
            return Err(_payload_error(f"unexpected job payload for job {job_id}", endpoint))
        return Ok(job)

    def play_job(self, job_id: int) -> Result[None, ReleaseError]:
        """Trigger a manual job. The response body is ignored."""
        result = self._http.request_json(
            "POST", self.project_url(f"jobs/{job_id}/play"), headers=self._headers()
        )
        if isinstance(result, Err):
            return Err(_api_error(f"failed to play job {job_id}", result.error))
        return Ok(None)
