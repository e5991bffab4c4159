"""
Energy Audit Pipeline - PDF Extraction & Dashboard Aggregation
==============================================================

Reads uploaded energy-audit PDF reports, extracts organisation, savings,
energy-source and recommended-action data by pattern matching, and folds
each report into an in-memory dashboard model.

Usage:
    python -m audit_pipeline.orchestrator report.pdf [report2.pdf ...]
"""

__version__ = "0.1.0"
