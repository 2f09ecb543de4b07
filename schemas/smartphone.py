"""
Pydantic schema for a mapped smartphone record
"""

from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class SmartphoneRecord(BaseModel):
    """
    One typed smartphone record, the unit of work of the batch job.
    
    Ensures:
    - All six fields are present and non-blank
    - Year is an integer, sizes and prices are decimals
    - Price and screen size are non-negative
    """
    
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=200)
    operating_system: str = Field(..., min_length=1, max_length=100)
    release_year: int
    screen_size: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
    )
    
    def to_params(self) -> Dict[str, Any]:
        """Named bind parameters for an INSERT into the smartphones table."""
        return self.model_dump()
