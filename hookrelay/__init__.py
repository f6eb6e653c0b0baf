"""hookrelay - multi-provider webhook inbox with signed ingestion and replay."""

__version__ = "1.0.0"
