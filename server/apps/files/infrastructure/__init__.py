"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3-compatible object storage backend and its per-user adapter
- Per-user metadata store over the File model
- Scoped and service data clients combining both
- Storage key and MIME type helpers

Keep infrastructure concerns separate from business logic.
"""
