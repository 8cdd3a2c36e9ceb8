"""Conflict errors for the logistics context.

Conflicts are validation failures caused by existing state rather than by
the request itself. They subclass ``ValidationError`` so domain callers can
treat them uniformly; the API maps them to HTTP 409.
"""

from protean.exceptions import ValidationError


class ConflictError(ValidationError):
    """The request clashes with data that already exists."""


class DealConflict(ConflictError):
    """The transporter already has a Deal in an overlapping window."""


class ParcelAlreadyLinked(ConflictError):
    """The Parcel is already linked to a different Offer."""
