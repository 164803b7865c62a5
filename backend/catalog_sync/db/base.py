"""SQLAlchemy Declarative Base - shared base class for the ORM models.

Invariants:
    - All models inherit from Base
    - Base.metadata is what Alembic autogenerates against
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for catalog ORM models."""
    pass
