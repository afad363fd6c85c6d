from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from .models import Job

# Built-in job streams as (id, arrival, service).
SAMPLE_STREAMS: Dict[str, Tuple[Tuple[int, float, float], ...]] = {
    "a": (
        (1, 0.0, 3.0),
        (2, 2.0, 6.0),
        (3, 4.0, 4.0),
        (4, 6.0, 5.0),
        (5, 8.0, 2.0),
    ),
    # A mix of long jobs up front and short ones arriving later.
    "b": (
        (1, 0.0, 8.0),
        (2, 1.0, 4.0),
        (3, 2.0, 9.0),
        (4, 3.0, 5.0),
        (5, 10.0, 2.0),
        (6, 10.0, 1.0),
    ),
}


def sample_stream(name: str) -> List[Job]:
    """
    Return a fresh list of jobs for one of the built-in streams.
    """
    key = name.lower()
    if key not in SAMPLE_STREAMS:
        raise ValueError(f"Unknown sample stream '{name}' (choose from {', '.join(SAMPLE_STREAMS)})")
    return [Job(id=i, arrival=a, service=s) for i, a, s in SAMPLE_STREAMS[key]]


def load_workload(path: str | Path) -> List[Job]:
    """
    Load a job stream from a JSON or CSV file into a list of Job objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        jobs = _load_json(path)
    elif suffix == ".csv":
        jobs = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    _check_unique_ids(jobs)
    return jobs


def _load_json(path: Path) -> List[Job]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of job objects")

    return [_job_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Job]:
    jobs: List[Job] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            jobs.append(_job_from_mapping(row))
    return jobs


def _job_from_mapping(mapping) -> Job:
    try:
        job_id = int(mapping["id"])
        arrival = float(mapping["arrival"])
        service = float(mapping["service"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid job entry: {mapping!r}") from exc

    if not (math.isfinite(arrival) and math.isfinite(service)):
        raise ValueError(f"Job arrival and service must be finite: {mapping!r}")
    if job_id <= 0:
        raise ValueError(f"Job id must be positive: {mapping!r}")
    if arrival < 0:
        raise ValueError(f"Job arrival must be non-negative: {mapping!r}")

    return Job(id=job_id, arrival=arrival, service=service)


def _check_unique_ids(jobs: Iterable[Job]) -> None:
    seen = set()
    for job in jobs:
        if job.id in seen:
            raise ValueError(f"Duplicate job id {job.id} in workload")
        seen.add(job.id)
