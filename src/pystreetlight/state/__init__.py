"""State layer.

This package is the single source of truth for how fix events, maintenance
actions and reports are merged into a deterministic per-light status.
"""
