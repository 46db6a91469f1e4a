"""db: shared database library (SQLAlchemy, async engine helpers).

Public exports
--------------
- ``Base`` for schema creation
- ORM models in ``db.models.finance`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.finance import Base, Category, Transaction

__all__ = [
    "Base",
    "Category",
    "Transaction",
]
