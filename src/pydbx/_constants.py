"""Shared constants for SQL building and record mapping."""

DB_TAG = "db"
"""Metadata key holding a dataclass field's column annotation."""

EMBEDDED_TAG = "embedded"
"""Metadata key marking a nested record that adds no name segment."""

SKIP_TAG = "-"
"""Annotation value that excludes a field from mapping."""

PK_TAG = "pk"
"""Annotation prefix that marks a primary key field."""

IMPLICIT_PK_NAMES = ("ID", "id")
"""Logical field names inferred as primary key when none is marked."""

MAX_LIMIT = 2**63 - 1
"""Row limit used when only an offset is requested."""

DEFAULT_LIKE_ESCAPE = ("\\", "\\\\", "%", "\\%", "_", "\\_")
"""Default LIKE escape table as (from, to) pairs, applied in order."""
