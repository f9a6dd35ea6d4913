"""Operational scripts for the research-score service.

Run them as modules, e.g. `python -m scripts.ops.run_slate --date 2025-11-04`.
"""
