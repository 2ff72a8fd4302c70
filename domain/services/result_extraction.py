from __future__ import annotations

import re

from domain.models import ExternalJobRef

_URL_JOB_ID = re.compile(r"job[_-]?id[=/](\d+)", re.IGNORECASE)
_CONTENT_JOB_ID = re.compile(r"job[_-]?id[\"'\s:=]+(\d+)", re.IGNORECASE)


def extract_external_job(url: str, html: str, url_template: str) -> ExternalJobRef | None:
    """
    Best-effort lookup of the posted job's identifier after verification.

    The URL is checked before the page content. A miss returns ``None``;
    it is not an error.
    """
    match = _URL_JOB_ID.search(url) or _CONTENT_JOB_ID.search(html)
    if match is None:
        return None
    job_id = match.group(1)
    return ExternalJobRef(job_id=job_id, job_url=url_template.format(job_id=job_id))
