"""Core (UI-agnostic) dashboard logic.

This package contains:
- data loading (CSV -> string-valued pandas tables)
- the join/filter engine and typed rows
- cross-view selection state and dashboard sessions
- view compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
