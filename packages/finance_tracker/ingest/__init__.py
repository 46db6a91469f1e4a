"""Bank CSV ingestion: tokenizing, cell normalization, category resolution and
the row-by-row import pipeline."""
