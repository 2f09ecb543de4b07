"""
Core utilities and configuration for the smartphone batch job.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Settings loaded from environment variables / .env
    database: Async engine, session factory and table creation
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import load_settings
    from core.database import create_db_engine, create_session_factory
    from core.exceptions import MappingError, WriteError
    from core.logging import setup_logging

Example:
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL)
    
    engine = create_db_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)
"""

from core.exceptions import (
    ETLException,
    ConfigurationError,
    DuplicateRunError,
    ExtractionError,
    ResourceError,
    ParseError,
    TransformationError,
    MappingError,
    LoadError,
    WriteError,
)
from core.config import Settings, load_settings
from core.database import create_db_engine, create_session_factory, init_models
from core.logging import setup_logging

__all__ = [
    "Settings",
    "load_settings",
    "create_db_engine",
    "create_session_factory",
    "init_models",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ConfigurationError",
    "DuplicateRunError",
    "ExtractionError",
    "ResourceError",
    "ParseError",
    "TransformationError",
    "MappingError",
    "LoadError",
    "WriteError",
]
