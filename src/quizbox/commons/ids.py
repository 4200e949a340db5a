from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

# Integer surrogate keys. SQLite only autoincrements INTEGER PRIMARY KEY,
# so the in-memory test store gets the narrower type.
BigIntId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
