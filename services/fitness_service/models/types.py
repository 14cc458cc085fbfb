"""Column types shared by the fitness models.

Postgres gets native UUID/JSONB; other backends (SQLite in tests) fall back
to the portable SQLAlchemy types.
"""

from sqlalchemy import JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB

GUID = Uuid(as_uuid=True)
JSONDict = JSON().with_variant(JSONB(), "postgresql")
