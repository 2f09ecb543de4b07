"""
Delimited text file source read lazily with pandas
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence
import csv
import logging

import pandas as pd

from core.exceptions import ParseError, ResourceError
from ingestion.base import RecordSource, SourceRecord

logger = logging.getLogger(__name__)

# Column order of the smartphone file
FIELD_NAMES = (
    "brand",
    "model",
    "operating_system",
    "release_year",
    "screen_size",
    "price",
)

# Never present in the text files this source reads, so pandas keeps each
# physical line whole and the field split happens here
LINE_SEPARATOR = "\x1f"


class CSVRecordSource(RecordSource):
    """
    Read records from a delimited text file.
    
    Supports:
    - Configurable delimiter and header line count
    - Lazy reads of read_size lines at a time
    - Field count checks per line, before any padding
    
    Line numbers are 1-based physical lines, counting header and blank
    lines. Blank lines are not yielded. Quote characters have no special
    meaning. All values are returned as raw strings; typing is the mapper's job.
    """
    
    def __init__(
        self,
        file_path: str,
        delimiter: str = ";",
        header_lines: int = 1,
        field_names: Sequence[str] = FIELD_NAMES,
        read_size: int = 10,
        encoding: str = "utf-8"
    ):
        self.file_path = Path(file_path)
        self.delimiter = delimiter
        self.header_lines = header_lines
        self.field_names = tuple(field_names)
        self.read_size = read_size
        self.encoding = encoding
    
    @contextmanager
    def open(self) -> Iterator[Iterator[SourceRecord]]:
        if not self.file_path.is_file():
            raise ResourceError(
                "Source file not found",
                context={"file_path": str(self.file_path)}
            )
        
        logger.info(f"Reading records from {self.file_path}")
        
        reader = None
        try:
            reader = pd.read_csv(
                self.file_path,
                sep=LINE_SEPARATOR,
                header=None,
                names=["line"],
                skiprows=self.header_lines,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                quoting=csv.QUOTE_NONE,
                chunksize=self.read_size,
                encoding=self.encoding,
            )
        except pd.errors.EmptyDataError:
            # Nothing after the header
            logger.info(f"No records in {self.file_path}")
        except pd.errors.ParserError as e:
            raise ParseError(
                "Line could not be read",
                context=self._context(None),
                original_exception=e
            )
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceError(
                "Cannot open source file",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )
        
        if reader is None:
            yield iter(())
            return
        
        with reader:
            yield self._records(reader)
    
    def _records(self, reader) -> Iterator[SourceRecord]:
        line_number = self.header_lines
        frames = iter(reader)
        
        while True:
            try:
                frame = next(frames)
            except (StopIteration, pd.errors.EmptyDataError):
                return
            except pd.errors.ParserError as e:
                raise ParseError(
                    "Line could not be read",
                    context={**self._context(None), "after_line": line_number},
                    original_exception=e
                )
            except (OSError, UnicodeDecodeError) as e:
                raise ResourceError(
                    "Cannot read source file",
                    context={"file_path": str(self.file_path), "after_line": line_number},
                    original_exception=e
                )
            
            for line in frame["line"]:
                line_number += 1
                if pd.isna(line) or not line.strip():
                    continue
                
                yield SourceRecord(
                    line_number=line_number,
                    fields=self._split(line, line_number)
                )
    
    def _split(self, line: str, line_number: int) -> dict:
        values = line.split(self.delimiter)
        if len(values) != len(self.field_names):
            raise ParseError(
                f"Expected {len(self.field_names)} fields, found {len(values)}",
                context={**self._context(line_number), "found_fields": len(values)}
            )
        return dict(zip(self.field_names, values))
    
    def _context(self, line_number: Optional[int]) -> dict:
        context = {
            "file_path": str(self.file_path),
            "expected_fields": len(self.field_names),
        }
        if line_number is not None:
            context["line_number"] = line_number
        return context
