"""db: shared database library (SQLAlchemy) describing the CRM store.

Public exports
--------------
- ``Base`` and ``metadata`` for schema bootstrapping in tests and tooling
- ORM models in ``db.models.membership`` (re-exported for convenience)
- Engine/session helpers in ``db.client``

The tables themselves are owned by the CRM platform; this package only
describes the columns the reporting code reads.
"""

from __future__ import annotations

from .models.membership import Base, Contact, LineItem, Membership, PriceFieldValue

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "Contact",
    "LineItem",
    "Membership",
    "PriceFieldValue",
]
