"""Waxmoth: SBS-1 feed ingestion and per-aircraft aggregation."""
