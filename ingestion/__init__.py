"""
Chunk-oriented batch pipeline for smartphone records.

Modules:
    base: RecordSource interface and SourceRecord
    engine: ChunkEngine state machine owning chunk transactions
    runner: JobRunner, one identified run per call
    job_repository: Persistence of ETLRun metadata
    job: build_job composition root

Subpackages:
    extractors: Delimited file source (pandas)
    transformers: Field mapping and the pricing rule
    loaders: Bulk INSERT into the smartphones table

Architecture:
    Records flow strictly downstream:

    1. Read - CSVRecordSource tokenizes lines into named fields
    2. Map - SmartphoneMapper validates them into SmartphoneRecord
    3. Process - PriceTransformer applies the discount rule
    4. Write - SmartphoneLoader inserts the chunk in one statement

    ChunkEngine repeats 1-4 for chunks of CHUNK_SIZE records, committing
    each chunk in its own transaction.

Usage:
    from core.config import load_settings
    from core.database import create_db_engine
    from ingestion.job import build_job
    from schemas.job import JobParameters

Example:
    settings = load_settings()
    db_engine = create_db_engine(settings.DATABASE_URL)
    
    runner = build_job(settings, db_engine)
    result = await runner.run(JobParameters.now())
    
    print(f"Wrote {result.records_written} records: {result.status.value}")

Error Handling:
    Components raise the typed errors of core.exceptions. The engine turns
    them into a FAILED step; earlier chunks stay committed.
"""
