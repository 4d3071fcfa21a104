"""Manga downloading with image and metadata storage in Elasticsearch."""

__version__ = "0.1.0"