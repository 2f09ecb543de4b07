"""
Pricing rule applied to each smartphone record
"""

from decimal import Decimal, ROUND_HALF_UP

from schemas.smartphone import SmartphoneRecord

CENT = Decimal("0.01")


class PriceTransformer:
    """
    Discount models released before the cut-off year.
    
    Pure: no I/O, no shared state. The input record is never modified; a
    discounted copy is returned instead.
    """
    
    def __init__(self, cutoff_year: int = 2023, discount_factor: Decimal = Decimal("0.9")):
        self.cutoff_year = cutoff_year
        # str() keeps a float such as 0.9 exact
        self.discount_factor = Decimal(str(discount_factor))
    
    def transform(self, record: SmartphoneRecord) -> SmartphoneRecord:
        if record.release_year >= self.cutoff_year:
            return record
        
        price = (record.price * self.discount_factor).quantize(CENT, rounding=ROUND_HALF_UP)
        return record.model_copy(update={"price": price})
