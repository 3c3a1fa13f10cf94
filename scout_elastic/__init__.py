"""scout-elastic: Elasticsearch sync and query compilation for SQLAlchemy models."""

__version__ = "0.3.0"
