"""Utility modules."""

from .results import dedupe, identity_key, merge_runs, normalize, truncate

__all__ = ["normalize", "identity_key", "dedupe", "truncate", "merge_runs"]
