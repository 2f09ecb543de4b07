from sqlalchemy import BigInteger, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()

# Primary keys are BIGINT on PostgreSQL; SQLite only autoincrements INTEGER keys
BigIntegerKey = BigInteger().with_variant(Integer(), "sqlite")

# JSONB where available, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ============================================================================
# ENUMS
# ============================================================================

class ETLStatus(str, enum.Enum):
    """Job run status"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    STOPPED = "stopped"
