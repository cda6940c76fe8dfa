"""JSON field flattening, case additional information, and Elasticsearch storage and logging."""

__version__ = "0.1.0"
__all__ = ["documents", "eslog", "jsondecoder", "storage"]