# backend/padops/incidents/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..deps import get_sequences, get_store
from ..jobs.utils import find_by_id, now_iso, parse_dt
from ..locks.guard import resource_lock
from ..shared.sequence import SequenceGenerator
from ..shared.store import INCIDENT_TYPES, INCIDENTS, JOBS, JsonStore
from . import schemas as s
from .stats import downtime_summary

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/incidents",
    tags=["incidents"],
    dependencies=[Depends(resource_lock("incident", id_param="incident_id"))],
)


def _detach(job: dict | None, incident_id: int):
    if job and job.get("incidents"):
        job["incidents"] = [i for i in job["incidents"] if i != incident_id]


def _attach(job: dict, incident_id: int):
    job.setdefault("incidents", [])
    if incident_id not in job["incidents"]:
        job["incidents"].append(incident_id)


@router.get("", response_model=List[s.IncidentOut])
def list_incidents(store: JsonStore = Depends(get_store)):
    return store.read(INCIDENTS)


@router.get("/stats/summary", response_model=s.IncidentStatsOut)
def incident_stats(store: JsonStore = Depends(get_store)):
    return downtime_summary(store.read(INCIDENTS), store.read(INCIDENT_TYPES))


@router.get("/job/{job_id}", response_model=List[s.IncidentOut])
def incidents_by_job(job_id: int, store: JsonStore = Depends(get_store)):
    return [i for i in store.read(INCIDENTS) if i.get("job_id") == job_id]


@router.get("/type/{type_id}", response_model=List[s.IncidentOut])
def incidents_by_type(type_id: int, store: JsonStore = Depends(get_store)):
    return [i for i in store.read(INCIDENTS) if i.get("type_id") == type_id]


@router.get("/{incident_id}", response_model=s.IncidentOut)
def get_incident(incident_id: int, store: JsonStore = Depends(get_store)):
    incident = find_by_id(store.read(INCIDENTS), incident_id)
    if not incident:
        raise HTTPException(404, "Incident not found")
    return incident


@router.post("", response_model=s.IncidentOut, status_code=201)
def create_incident(
    payload: s.IncidentCreate,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
):
    incidents = store.read(INCIDENTS)
    ts = now_iso()
    incident = {
        "id": seq.next_id(INCIDENTS, (i["id"] for i in incidents)),
        **payload.model_dump(mode="json"),
        "created_at": ts,
        "updated_at": ts,
    }
    incidents.append(incident)
    store.write(INCIDENTS, incidents)

    jobs = store.read(JOBS)
    job = find_by_id(jobs, payload.job_id)
    if job:
        _attach(job, incident["id"])
        store.write(JOBS, jobs)
    else:
        logger.warning("Incident %s references unknown job %s", incident["id"], payload.job_id)

    logger.info("Created incident %s", incident["id"])
    return incident


@router.put("/{incident_id}", response_model=s.IncidentOut)
def update_incident(
    incident_id: int, payload: s.IncidentUpdate, store: JsonStore = Depends(get_store)
):
    incidents = store.read(INCIDENTS)
    incident = find_by_id(incidents, incident_id)
    if not incident:
        raise HTTPException(404, "Incident not found")

    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)

    start = parse_dt(changes.get("start_time") or incident["start_time"])
    end = parse_dt(changes.get("end_time") or incident.get("end_time"))
    if end is not None and end <= start:
        raise HTTPException(400, "End time must be after start time")

    new_job_id = changes.get("job_id")
    if new_job_id is not None and new_job_id != incident["job_id"]:
        jobs = store.read(JOBS)
        new_job = find_by_id(jobs, new_job_id)
        if not new_job:
            raise HTTPException(400, "Invalid job ID")
        _detach(find_by_id(jobs, incident["job_id"]), incident_id)
        _attach(new_job, incident_id)
        store.write(JOBS, jobs)

    incident.update(changes)
    incident["updated_at"] = now_iso()
    store.write(INCIDENTS, incidents)
    logger.info("Updated incident %s", incident_id)
    return incident


@router.delete("/{incident_id}", status_code=204)
def delete_incident(incident_id: int, store: JsonStore = Depends(get_store)):
    incidents = store.read(INCIDENTS)
    incident = find_by_id(incidents, incident_id)
    if not incident:
        raise HTTPException(404, "Incident not found")

    jobs = store.read(JOBS)
    job = find_by_id(jobs, incident["job_id"])
    if job:
        _detach(job, incident_id)
        store.write(JOBS, jobs)

    store.write(INCIDENTS, [i for i in incidents if i["id"] != incident_id])
    logger.info("Deleted incident %s", incident_id)
    return Response(status_code=204)
