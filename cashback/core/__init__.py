"""
Core utilities shared across the cashback tracker.

This package hosts configuration helpers (env vars, data paths, default
storage kind) and the structured logging setup. Repositories and services
depend on these primitives instead of reading os.environ directly.
"""
