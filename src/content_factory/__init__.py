"""Turn podcast transcripts into marketing asset bundles."""

__version__ = "0.1.0"
