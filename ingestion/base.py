"""
Abstract base class for record sources
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ContextManager, Dict, Iterator


@dataclass(frozen=True)
class SourceRecord:
    """One tokenized line: its 1-based line number and named raw fields."""
    line_number: int
    fields: Dict[str, str]


class RecordSource(ABC):
    """
    Abstract base class for all record sources.
    
    Responsibilities:
    - Scoped acquisition of the underlying resource
    - Skipping header lines
    - Tokenizing each line into named fields, lazily
    
    A pass is not restartable: iterate the result of a fresh open() to read
    again from the start.
    """
    
    @abstractmethod
    def open(self) -> ContextManager[Iterator[SourceRecord]]:
        """
        Open the resource for one pass.
        
        Returns:
            Context manager yielding an iterator of SourceRecord. The resource
            is released when the context exits, on success or error.
        
        Raises:
            ResourceError: If the resource cannot be opened
        """
        pass
