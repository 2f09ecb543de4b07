"""
Job parameters and results
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import ETLException
from models.base import ETLStatus


class JobParameters(BaseModel):
    """
    Identifying parameters of a job run.
    
    Distinct parameters give a distinct run; the run key is their
    canonical string form.
    """
    
    start_at: int = Field(..., ge=0, description="Launch time in epoch milliseconds")
    
    model_config = ConfigDict(frozen=True)
    
    @classmethod
    def now(cls) -> "JobParameters":
        return cls(start_at=int(time.time() * 1000))
    
    @property
    def run_key(self) -> str:
        return f"startAt={self.start_at}"
    
    def to_dict(self) -> Dict[str, Any]:
        return {"startAt": self.start_at}


@dataclass
class JobResult:
    """Outcome of one JobRunner.run call"""
    status: ETLStatus
    run_key: str
    etl_run_id: Optional[int] = None
    records_read: int = 0
    records_written: int = 0
    records_skipped: int = 0
    chunks_committed: int = 0
    error: Optional[ETLException] = None
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    
    @property
    def succeeded(self) -> bool:
        return self.status == ETLStatus.SUCCESS
    
    def to_dict(self) -> Dict[str, Any]:
        result = {
            "status": self.status.value,
            "run_key": self.run_key,
            "etl_run_id": self.etl_run_id,
            "records_read": self.records_read,
            "records_written": self.records_written,
            "records_skipped": self.records_skipped,
            "chunks_committed": self.chunks_committed,
        }
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.skipped:
            result["skipped"] = self.skipped
        return result
