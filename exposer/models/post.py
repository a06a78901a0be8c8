from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from exposer.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    post_type = Column(String(20), default="post", nullable=False)
    title = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=False, default="")
    slug = Column(String(200), index=True, nullable=False)
    status = Column(String(20), default="publish", nullable=False)
    author_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_posts_type_status", "post_type", "status"),)

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, post_type={self.post_type}, slug={self.slug})>"
