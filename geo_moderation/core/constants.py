"""Shared moderation constants — single source of truth.

Table, bucket and blob-prefix names default to the layout used by the
submission pipeline: pending rows in ``need_approval``, published rows
in ``locs``, and both image sets in the ``locs`` bucket under
``not_approved/`` and ``image/``.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Metadata tables
# ---------------------------------------------------------------------------

DEFAULT_PENDING_TABLE: str = "need_approval"
"""Table holding submissions that await a reviewer decision."""

DEFAULT_PUBLISHED_TABLE: str = "locs"
"""Table holding approved, public-facing submissions."""

ID_COLUMN: str = "filename"
LATITUDE_COLUMN: str = "lat"
LONGITUDE_COLUMN: str = "lng"

# ---------------------------------------------------------------------------
# Blob layout
# ---------------------------------------------------------------------------

DEFAULT_BUCKET: str = "locs"
"""Bucket (Supabase) or container (Azure) holding both image sets."""

DEFAULT_PENDING_PREFIX: str = "not_approved"
DEFAULT_PUBLISHED_PREFIX: str = "image"
DEFAULT_BLOB_EXTENSION: str = ".jpg"

# ---------------------------------------------------------------------------
# Store backends
# ---------------------------------------------------------------------------

SUPABASE_BACKEND: str = "supabase"
AZURE_BACKEND: str = "azure"
MEMORY_BACKEND: str = "memory"

METADATA_BACKENDS: frozenset[str] = frozenset({SUPABASE_BACKEND, MEMORY_BACKEND})
BLOB_BACKENDS: frozenset[str] = frozenset({SUPABASE_BACKEND, AZURE_BACKEND, MEMORY_BACKEND})

# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

COORDINATE_SCALE: float = 1e6
"""Coordinates are kept to six decimal places (about 0.1 m)."""
