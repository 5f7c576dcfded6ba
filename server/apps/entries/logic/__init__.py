"""Business logic layer for entries app.

This package contains all business logic for entries:
- Direct uploads, edits, downloads and deletes
- Chunked uploads over the blob store multipart protocol
- Garbage collection of expired entries

All business logic should be implemented here, separate from
models (data layer), infrastructure (external systems) and views.
"""
