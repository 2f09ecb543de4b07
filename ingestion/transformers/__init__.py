from ingestion.transformers.mapper import SmartphoneMapper
from ingestion.transformers.pricing import PriceTransformer

__all__ = ["SmartphoneMapper", "PriceTransformer"]
