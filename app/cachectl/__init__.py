"""cachectl - centralize per-project cache directories.

Replaces scattered tool caches (``.ruff_cache``, ``.mypy_cache``, ...)
with redirects into a shared central location, preserving any existing
content in a quarantine area.
"""

__version__ = "0.3.0"
