"""Press Cache - memoized storage for compressed and minified assets.

This package caches the output of expensive, deterministic asset
transformations keyed by their component files, so that concurrent
requests build each artifact at most once.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
