"""Retrying, credential-aware repository fetching for build pipelines."""

__version__ = "0.1.0"
