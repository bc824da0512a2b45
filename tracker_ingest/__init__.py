"""Vehicle ping ingestion: authenticate, validate and record tracker pings."""

__version__ = "1.0.0"
