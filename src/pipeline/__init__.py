"""
Pipeline Package
================
Outer layer around the analytics package.

Modules:
  record_loader     - coerce fetched table rows into engine records
  insight_report    - standard insight cards + text digest
  insights_pipeline - fetch -> aggregate -> analyse run with status
"""
