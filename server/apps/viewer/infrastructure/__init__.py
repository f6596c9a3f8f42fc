"""Infrastructure layer for viewer app.

This package contains integrations with the filesystem:
- Memoized directory listings, file reads and stats
- Stats formatting for display

Keep infrastructure concerns separate from navigation logic.
"""
