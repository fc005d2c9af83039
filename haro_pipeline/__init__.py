"""HARO email ingestion: parse journalist queries, store and match them."""

__version__ = "0.1.0"
