"""
Option Model

Site-wide key/value storage. Values are arbitrary JSON documents; the route
and discovery tables are stored here as well as plain settings.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from exposer.database import Base


class Option(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(191), unique=True, index=True, nullable=False)
    value = Column(JSON, nullable=True)
    autoload = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Option(name={self.name})>"
