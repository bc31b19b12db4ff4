"""
Declarative base for the ingredient store tables.

Every stored model gets an integer primary key and created/updated
timestamps, plus to_dict() for JSON output from the command line.
"""

import enum
from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

from src.utils.datetime_utils import utc_now

Base = declarative_base()


def _plain_value(value: Any) -> Any:
    """Convert a column value into something json.dumps accepts."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class BaseModel(Base):
    """
    Abstract base for stored models.

    Subclasses declare their own __tablename__ and columns.
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_dict(self, include_relationships: bool = False) -> Dict[str, Any]:
        """
        Column values keyed by column name.

        Args:
            include_relationships: Also serialize related models one level
                deep (their own relationships are left out)
        """
        result = {
            column.name: _plain_value(getattr(self, column.name))
            for column in self.__table__.columns
        }
        if not include_relationships:
            return result

        for relationship in self.__mapper__.relationships:
            related = getattr(self, relationship.key)
            if related is None:
                result[relationship.key] = None
            elif relationship.uselist:
                result[relationship.key] = [item.to_dict() for item in related]
            else:
                result[relationship.key] = related.to_dict()
        return result

    def __repr__(self) -> str:
        name = getattr(self, "name", None)
        if name is None:
            return f"{type(self).__name__}(id={self.id})"
        return f"{type(self).__name__}(id={self.id}, name='{name}')"
