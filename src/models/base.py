"""
Base model class for all database models.

Provides common functionality and fields for all models:
- Primary key (UUID string, portable across workspaces and bundles)
- Timestamp fields (created_at, updated_at)
- Utility methods (to_dict, __repr__)
- SQLAlchemy declarative base
"""

import uuid as uuid_lib
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base, validates

from src.utils.datetime_utils import utc_now

# Create the declarative base for all models
Base = declarative_base()


def new_id() -> str:
    """Generate a fresh primary key value."""
    return str(uuid_lib.uuid4())


class BaseModel(Base):
    """
    Abstract base model with common fields and methods.

    All models should inherit from this class to get:
    - id: Primary key (UUID stored as string for SQLite compatibility)
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last modified
    - to_dict(): Convert model to dictionary
    """

    __abstract__ = True

    id = Column(String(36), primary_key=True, default=new_id)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self, include_relationships: bool = False) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Args:
            include_relationships: If True, include related objects (default: False)

        Returns:
            Dictionary representation of the model
        """
        result = {}

        for column in self.__table__.columns:
            value = getattr(self, column.name)

            if isinstance(value, datetime):
                value = value.isoformat()

            result[column.name] = value

        if include_relationships:
            for relationship in self.__mapper__.relationships:
                rel_name = relationship.key
                rel_value = getattr(self, rel_name)

                if rel_value is None:
                    result[rel_name] = None
                elif isinstance(rel_value, list):
                    result[rel_name] = [item.to_dict() for item in rel_value]
                else:
                    result[rel_name] = rel_value.to_dict()

        return result

    @validates("id")
    def _validate_id(self, _key: str, value: Any) -> str:
        """Normalize UUID values to strings for SQLite compatibility."""
        if value is None:
            return value
        return str(value)

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ClassName(id=..., name='...')"
        """
        class_name = self.__class__.__name__
        attrs = []

        if hasattr(self, "id") and self.id is not None:
            attrs.append(f"id={self.id}")

        if hasattr(self, "name") and self.name is not None:
            attrs.append(f"name='{self.name}'")

        attrs_str = ", ".join(attrs)
        return f"{class_name}({attrs_str})"
