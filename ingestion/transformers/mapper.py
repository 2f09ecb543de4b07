"""
Map tokenized fields into typed SmartphoneRecord models
"""

from typing import Dict, Mapping, Optional
import logging

from pydantic import ValidationError

from core.exceptions import MappingError
from ingestion.extractors.csv_extractor import FIELD_NAMES
from schemas.smartphone import SmartphoneRecord

logger = logging.getLogger(__name__)


class SmartphoneMapper:
    """
    Convert raw string fields into a validated SmartphoneRecord.
    
    Handles:
    - Required field checks (absent or blank)
    - Type conversion (year, screen size, price)
    - Range validation
    """
    
    def __init__(self, field_names=FIELD_NAMES):
        self.field_names = tuple(field_names)
    
    def map(self, fields: Mapping[str, Optional[str]], line_number: Optional[int] = None) -> SmartphoneRecord:
        """
        Map one tokenized line.
        
        Raises:
            MappingError: If a field is missing or cannot be converted
        """
        values: Dict[str, str] = {}
        missing = []
        
        for name in self.field_names:
            raw = fields.get(name)
            value = raw.strip() if isinstance(raw, str) else raw
            if value is None or value == "":
                missing.append(name)
            else:
                values[name] = value
        
        if missing:
            raise MappingError(
                "Required field(s) missing",
                context={
                    "line_number": line_number,
                    "field_errors": {name: "Field required" for name in missing}
                }
            )
        
        try:
            return SmartphoneRecord(**values)
        except ValidationError as e:
            field_errors = {
                ".".join(str(part) for part in err["loc"]): err["msg"]
                for err in e.errors()
            }
            raise MappingError(
                "Record could not be mapped",
                context={
                    "line_number": line_number,
                    "field_errors": field_errors
                },
                original_exception=e
            )
