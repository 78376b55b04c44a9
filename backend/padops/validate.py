"""Cross-table consistency check for the JSON data directory.

Run as ``python -m padops.validate [--data-dir DIR] [--fix]``. Exits 1 when
broken references are found, 0 otherwise. ``--fix`` backs up ``jobs`` and
fills in a missing ``status`` or ``incidents`` list on each job.
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .jobs.utils import find_by_id
from .shared.backup import BackupManager
from .shared.config import Settings
from .shared.logging import setup_logging
from .shared.store import INCIDENT_TYPES, INCIDENTS, JOBS, OPERATORS, PADS, JsonStore

logger = logging.getLogger(__name__)


def find_problems(store: JsonStore) -> List[str]:
    operators = store.read(OPERATORS)
    pads = store.read(PADS)
    jobs = store.read(JOBS)
    incidents = store.read(INCIDENTS)
    incident_types = store.read(INCIDENT_TYPES)
    problems: List[str] = []

    for pad in pads:
        if not find_by_id(operators, pad.get("operator_id")):
            problems.append(f"Invalid operator_id {pad.get('operator_id')} for pad {pad.get('id')}")

    for job in jobs:
        pad = find_by_id(pads, job.get("pad_id"))
        if not pad:
            problems.append(f"Invalid pad_id {job.get('pad_id')} for job {job.get('id')}")
            continue
        operator = find_by_id(operators, pad.get("operator_id"))
        if operator and (job.get("pad_name") != pad["name"] or job.get("operator_name") != operator["name"]):
            problems.append(f"Inconsistent names for job {job.get('id')}")

    for incident in incidents:
        if not find_by_id(jobs, incident.get("job_id")):
            problems.append(f"Invalid job_id {incident.get('job_id')} for incident {incident.get('id')}")
        if not find_by_id(incident_types, incident.get("type_id")):
            problems.append(f"Invalid type_id {incident.get('type_id')} for incident {incident.get('id')}")

    return problems


def fix_jobs(store: JsonStore, backups: BackupManager) -> int:
    """Fill in missing ``status`` / ``incidents`` fields. Returns how many jobs changed."""
    jobs = store.read(JOBS)
    fixed = 0
    for job in jobs:
        changed = False
        if not job.get("status"):
            job["status"] = "completed" if job.get("end_date") else "active"
            changed = True
        if job.get("incidents") is None:
            job["incidents"] = []
            changed = True
        fixed += changed

    if fixed:
        backups.backup_file(JOBS)
        store.write(JOBS, jobs)
        logger.info("Fixed %d jobs", fixed)
    return fixed


def main(argv: Optional[List[str]] = None) -> None:
    """Execute the data consistency check."""
    parser = argparse.ArgumentParser(description="Check the JSON tables for broken references")
    parser.add_argument("--data-dir", type=Path, default=None, help="Data directory (default: DATA_DIR setting)")
    parser.add_argument("--fix", action="store_true", help="Normalize job records before checking")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args(argv)

    overrides = {"LOG_LEVEL": args.log_level, "LOG_DIR": None}
    if args.data_dir is not None:
        overrides["DATA_DIR"] = args.data_dir
    cfg = Settings(**overrides)
    setup_logging(cfg)

    try:
        store = JsonStore(cfg.DATA_DIR)
        if args.fix:
            fix_jobs(store, BackupManager(store, cfg.backup_dir, keep=cfg.BACKUP_KEEP))
        problems = find_problems(store)
    except Exception:
        logger.exception("Validation failed")
        sys.exit(1)

    for problem in problems:
        logger.error(problem)
    if problems:
        logger.error("%d problems found in %s", len(problems), cfg.DATA_DIR)
        sys.exit(1)
    logger.info("Data in %s is consistent", cfg.DATA_DIR)
    sys.exit(0)


if __name__ == "__main__":
    main()
