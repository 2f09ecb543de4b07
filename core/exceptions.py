"""
Custom exceptions for the batch pipeline with structured error context.

Every component raises one of these; the chunk engine catches them at each
state and turns them into a terminal status on the step execution.

Exception Hierarchy:
    ETLException (base)
    ├── ConfigurationError
    │   └── DuplicateRunError
    ├── ExtractionError
    │   ├── ResourceError
    │   └── ParseError
    ├── TransformationError
    │   └── MappingError
    └── LoadError
        └── WriteError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all pipeline errors.
    
    Attributes:
        message: Human-readable error message
        context: Additional context information (line number, chunk, etc.)
        original_exception: The original exception that was caught (if any)
    """
    
    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)
        
        self.context["error_timestamp"] = self.timestamp.isoformat()
        
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception
    
    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"
        
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"
        
        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"
        
        return base_msg
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(ETLException):
    """
    Raised when settings or component wiring are invalid.
    
    Always raised before any source or destination I/O.
    
    Context should include:
        - field_errors: Mapping of setting name to validation message
    """
    pass


class DuplicateRunError(ConfigurationError):
    """
    Raised when a job run with the same run key already exists.
    
    Context should include:
        - job_name: Name of the job
        - run_key: The run key that was reused
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for source read failures."""
    pass


class ResourceError(ExtractionError):
    """
    Raised when the source file cannot be opened or read.
    
    Context should include:
        - file_path: Path to the source file
    """
    pass


class ParseError(ExtractionError):
    """
    Raised when a line cannot be split into the expected fields.
    
    Context should include:
        - file_path: Path to the source file
        - line_number: Line number where error occurred (if known)
        - expected_fields: Number of fields expected
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Base exception for record conversion failures."""
    pass


class MappingError(TransformationError):
    """
    Raised when tokenized fields cannot be mapped to a typed record.
    
    Context should include:
        - line_number: Source line of the record (if known)
        - field_errors: Dictionary of field-level errors
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for destination write failures."""
    pass


class WriteError(LoadError):
    """
    Raised when the destination rejects a chunk.
    
    Context should include:
        - table_name: Name of the table
        - chunk_number: 1-based chunk index within the run
        - chunk_size: Number of records in the chunk
    """
    pass
