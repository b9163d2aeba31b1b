"""HTTP engine exposing the budge ingestion pipeline."""
