# backend/padops/jobs/utils.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Iterable, Optional


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def find_by_id(rows: Iterable[dict], rid: int) -> Optional[dict]:
    return next((r for r in rows if r.get("id") == rid), None)


def parse_dt(value: Any) -> Optional[datetime]:
    """ISO 문자열/None → aware datetime (naive 값은 UTC로 간주)"""
    if value in (None, ""):
        return None
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def is_active(job: dict) -> bool:
    return not job.get("end_date") and job.get("status", "active") != "completed"


def enrich_job(job: dict, pads: list, operators: list) -> Optional[dict]:
    """pad/operator 이름을 붙여서 반환. 참조가 깨진 작업은 None."""
    pad = find_by_id(pads, job.get("pad_id"))
    operator = find_by_id(operators, pad.get("operator_id")) if pad else None
    if not pad or not operator:
        return None
    return {
        **job,
        "pad_name": pad["name"],
        "operator_name": operator["name"],
        "incidents": job.get("incidents") or [],
    }


def ranges_overlap(
    start: datetime, end: Optional[datetime], other_start: datetime, other_end: Optional[datetime]
) -> bool:
    """Closed-interval overlap; an open end runs until now."""
    now = datetime.now(timezone.utc)
    end = end or now
    other_end = other_end or now
    return start <= other_end and other_start <= end


def find_overlap(
    jobs: list, pad_id: int, start: datetime, end: Optional[datetime], exclude_id: int
) -> Optional[dict]:
    for other in jobs:
        if other.get("pad_id") != pad_id or other.get("id") == exclude_id:
            continue
        if ranges_overlap(start, end, parse_dt(other["start_date"]), parse_dt(other.get("end_date"))):
            return other
    return None


def sync_job_names(jobs: list, pad: dict, operator_name: Optional[str]) -> int:
    """패드 수정 후 해당 패드의 작업들에 pad_name / operator_name 반영"""
    touched = 0
    for job in jobs:
        if job.get("pad_id") != pad["id"]:
            continue
        job["pad_name"] = pad["name"]
        if operator_name is not None:
            job["operator_name"] = operator_name
        touched += 1
    return touched
