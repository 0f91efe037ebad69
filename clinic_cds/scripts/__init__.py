"""
Command-line entry points.

Design intent:
- Run as `python -m clinic_cds.scripts.<name>`; orchestration only, no decision logic.
"""
