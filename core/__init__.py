"""Core (UI-agnostic) dashboard logic.

This package contains:
- data loading (CSV -> pandas) and date-range filtering
- the aggregation pipeline (summary, daily rollup, type distribution, heart rate, sleep)
- tab compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
