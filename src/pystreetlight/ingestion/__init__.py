"""Ingestion layer.

This package contains the row-level normalization that turns raw table rows
into typed records before they reach the state layer.
"""

__all__: list[str] = []
