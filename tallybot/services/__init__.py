"""Business logic: day keys, the tally store, ingestion, backfill, queries."""
