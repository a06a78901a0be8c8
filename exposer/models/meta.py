"""
Meta Model

Key/value metadata attached to posts, users and terms. One table serves all
three object types; ``object_type`` tells which table ``object_id`` points at.
"""

from sqlalchemy import JSON, Column, Index, Integer, String

from exposer.database import Base


class Meta(Base):
    __tablename__ = "meta"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    object_type = Column(String(10), nullable=False)
    object_id = Column(Integer, nullable=False)
    meta_key = Column(String(255), nullable=False)
    meta_value = Column(JSON, nullable=True)

    __table_args__ = (Index("ix_meta_object_key", "object_type", "object_id", "meta_key"),)

    def __repr__(self) -> str:
        return f"<Meta(object_type={self.object_type}, object_id={self.object_id}, meta_key={self.meta_key})>"
