"""Infrastructure layer for entries app.

This package contains integrations with external systems:
- Blob storage backend (S3/MinIO/R2) including multipart uploads
- Id generation and client input normalization

Keep infrastructure concerns separate from business logic.
"""
