"""Shared SQLAlchemy models registry for the CRM store.

Currently includes the membership/price-set tables read by ``membership_pivot``.
"""

from .membership import Base, Contact, LineItem, Membership, PriceFieldValue

__all__ = [
    "Base",
    "Contact",
    "LineItem",
    "Membership",
    "PriceFieldValue",
]
