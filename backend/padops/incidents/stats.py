# backend/padops/incidents/stats.py
from __future__ import annotations
import pandas as pd


def downtime_summary(incidents: list, incident_types: list) -> dict:
    """유형별 건수/다운타임(시간) 집계. 종료되지 않은 사건은 다운타임 0."""
    if not incidents:
        return {"total_incidents": 0, "total_downtime_hours": 0.0, "by_type": {}}

    df = pd.DataFrame(incidents)
    if "end_time" not in df:
        df["end_time"] = None
    names = {t.get("id"): t.get("name") for t in incident_types}

    start = pd.to_datetime(df["start_time"], utc=True, errors="coerce")
    end = pd.to_datetime(df["end_time"], utc=True, errors="coerce")
    df["downtime"] = ((end - start).dt.total_seconds() / 3600).fillna(0.0).clip(lower=0.0)
    df["type_name"] = df["type_id"].map(names).fillna("Unknown")

    grouped = df.groupby("type_name")["downtime"].agg(["count", "sum"])
    by_type = {
        str(name): {"count": int(row["count"]), "total_downtime": round(float(row["sum"]), 4)}
        for name, row in grouped.iterrows()
    }
    return {
        "total_incidents": int(len(df)),
        "total_downtime_hours": round(float(df["downtime"].sum()), 4),
        "by_type": by_type,
    }
