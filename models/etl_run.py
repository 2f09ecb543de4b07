from sqlalchemy import Column, String, Enum, DateTime, Float, Integer, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from models.base import Base, BigIntegerKey, ETLStatus, JSONType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ETLRun(Base):
    """
    One identified execution of a batch job.
    
    Purpose:
    - Audit trail of all job runs
    - Distinguish repeated invocations by their run key
    - Error tracking and debugging
    
    Design:
    - run_key is derived from the job parameters and is unique per job,
      so a re-execution needs new parameters
    - records_written / chunks_committed are incremented inside each
      chunk's transaction and always match the committed rows
    """
    __tablename__ = "etl_runs"
    
    id = Column(BigIntegerKey, primary_key=True, autoincrement=True)
    
    # Identity
    job_name = Column(String(100), nullable=False, index=True)
    run_key = Column(String(255), nullable=False)
    parameters = Column(JSONType, nullable=True)
    
    # Run metadata
    status = Column(Enum(ETLStatus), default=ETLStatus.PENDING, nullable=False, index=True)
    
    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Float, nullable=True)
    
    # Statistics
    records_read = Column(Integer, default=0, nullable=False)
    records_written = Column(Integer, default=0, nullable=False)
    records_skipped = Column(Integer, default=0, nullable=False)
    chunks_committed = Column(Integer, default=0, nullable=False)
    
    # Error tracking
    error_message = Column(Text, nullable=True)
    error_details = Column(JSONType, nullable=True)
    
    # Configuration snapshot
    config_snapshot = Column(JSONType, nullable=True)
    
    # Relationships
    smartphones = relationship("Smartphone", back_populates="etl_run")
    
    # Indexes
    __table_args__ = (
        Index("idx_etl_run_job_key", "job_name", "run_key", unique=True),
        Index("idx_etl_run_status", "status", "started_at"),
    )
