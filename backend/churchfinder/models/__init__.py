"""ORM models. Importing this package registers every table on Base.metadata."""

from churchfinder.models.church import Church, Review, ServiceTime

__all__ = ["Church", "Review", "ServiceTime"]
