"""
Pydantic schemas and value objects.

Modules:
    smartphone: SmartphoneRecord, the validated record flowing through the pipeline
    job: JobParameters (run identity) and JobResult (run outcome)
"""

from schemas.smartphone import SmartphoneRecord
from schemas.job import JobParameters, JobResult

__all__ = [
    "SmartphoneRecord",
    "JobParameters",
    "JobResult",
]
