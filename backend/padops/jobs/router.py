# backend/padops/jobs/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_sequences, get_store
from ..locks.guard import resource_lock
from ..shared.sequence import SequenceGenerator
from ..shared.store import INCIDENTS, JOBS, OPERATORS, PADS, JsonStore
from . import schemas as s
from .utils import enrich_job, find_by_id, find_overlap, now_iso, parse_dt

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/jobs",
    tags=["jobs"],
    dependencies=[Depends(resource_lock("job", id_param="job_id"))],
)


@router.get("", response_model=List[s.JobOut])
def list_jobs(store: JsonStore = Depends(get_store)):
    pads, operators = store.read(PADS), store.read(OPERATORS)
    out = []
    for job in store.read(JOBS):
        enriched = enrich_job(job, pads, operators)
        if enriched is None:
            logger.warning("Skipping job %s with missing pad or operator", job.get("id"))
            continue
        out.append(enriched)
    return out


@router.get("/{job_id}", response_model=s.JobOut)
def get_job(job_id: int, store: JsonStore = Depends(get_store)):
    job = find_by_id(store.read(JOBS), job_id)
    if not job:
        raise HTTPException(404, "Job not found")
    enriched = enrich_job(job, store.read(PADS), store.read(OPERATORS))
    if enriched is None:
        raise HTTPException(404, "Invalid job data - missing pad or operator")
    return enriched


@router.post("", response_model=s.JobOut, status_code=201)
def create_job(
    payload: s.JobCreate,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
):
    jobs = store.read(JOBS)
    pad = find_by_id(store.read(PADS), payload.pad_id)
    if not pad:
        raise HTTPException(400, "Invalid pad ID")
    operator = find_by_id(store.read(OPERATORS), pad.get("operator_id"))
    if not operator:
        raise HTTPException(400, "Invalid operator ID for pad")

    ts = now_iso()
    job = {
        "id": seq.next_id(JOBS, (j["id"] for j in jobs)),
        "pad_id": payload.pad_id,
        "start_date": payload.model_dump(mode="json")["start_date"],
        "end_date": None,
        "status": "active",
        "incidents": [],
        "created_at": ts,
        "updated_at": ts,
        "operator_name": operator["name"],
        "pad_name": pad["name"],
    }
    jobs.append(job)
    store.write(JOBS, jobs)
    logger.info("Created new job with ID: %s", job["id"])
    return job


@router.put("/{job_id}", response_model=s.JobOut)
def update_job(job_id: int, payload: s.JobUpdate, store: JsonStore = Depends(get_store)):
    jobs = store.read(JOBS)
    job = find_by_id(jobs, job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    changes = payload.model_dump(mode="json", exclude_unset=True)

    if payload.status == "completed":
        # 완료 처리: 종료일이 시작일 이후인지만 확인
        start = parse_dt(changes.get("start_date") or job["start_date"])
        if parse_dt(changes["end_date"]) < start:
            raise HTTPException(400, "End date cannot be before start date")
    elif {"pad_id", "start_date", "end_date"} & changes.keys():
        pad_id = changes.get("pad_id") or job["pad_id"]
        start = parse_dt(changes.get("start_date") or job["start_date"])
        end = parse_dt(changes.get("end_date") or job.get("end_date"))
        if end is not None and end < start:
            raise HTTPException(400, "End date must be after start date")
        if find_overlap(jobs, pad_id, start, end, exclude_id=job_id):
            raise HTTPException(
                400, "Cannot update job: Date range overlaps with an existing job for this pad"
            )

    job.update(changes)
    job["updated_at"] = now_iso()
    store.write(JOBS, jobs)
    logger.info("Updated job %s", job_id)
    return job


@router.delete("/{job_id}", response_model=s.JobDeleteOut)
def delete_job(job_id: int, store: JsonStore = Depends(get_store)):
    jobs = store.read(JOBS)
    if not find_by_id(jobs, job_id):
        raise HTTPException(404, "Job not found")

    incidents = store.read(INCIDENTS)
    remaining = [i for i in incidents if i.get("job_id") != job_id]
    removed = len(incidents) - len(remaining)
    if removed:
        store.write(INCIDENTS, remaining)

    store.write(JOBS, [j for j in jobs if j["id"] != job_id])
    logger.info("Deleted job %s with %d incidents", job_id, removed)
    return {
        "message": "Job and associated incidents deleted successfully",
        "deletedIncidents": removed,
    }
