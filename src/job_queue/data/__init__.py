"""Record schemas and the validated JSON document store."""

from job_queue.data.models import (
    AppConfig,
    Job,
    JobQueue,
    Project,
    ProjectPool,
    ProjectStatus,
)
from job_queue.data.store import JsonDocument, decode_record, encode_record

__all__ = [
    "AppConfig",
    "Job",
    "JobQueue",
    "JsonDocument",
    "Project",
    "ProjectPool",
    "ProjectStatus",
    "decode_record",
    "encode_record",
]
