"""Core services: paths, configuration, locking, retry and history state."""
