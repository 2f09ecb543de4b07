from ingestion.loaders.smartphone_loader import SmartphoneLoader

__all__ = ["SmartphoneLoader"]
