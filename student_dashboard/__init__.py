"""
Core package for the student enrollment dashboard.

Submodules provide data loading, field normalization, metrics, filtering,
report export, and user interface rendering helpers that are orchestrated by
the top-level `app.py`.
"""
