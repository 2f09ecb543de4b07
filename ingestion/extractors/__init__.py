from ingestion.extractors.csv_extractor import CSVRecordSource, FIELD_NAMES

__all__ = ["CSVRecordSource", "FIELD_NAMES"]
