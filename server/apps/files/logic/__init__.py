"""Business logic layer for files app.

This package contains all business logic for file operations:
- Upload, list and delete across the metadata and object stores
- Per-operation state tracking
- Reconciliation of objects left behind by failed cleanups

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
