from sqlalchemy import Column, Index, Integer, String, Text

from exposer.database import Base


class Term(Base):
    __tablename__ = "terms"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    taxonomy = Column(String(32), nullable=False)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), index=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    parent_id = Column(Integer, nullable=False, default=0)
    count = Column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_terms_taxonomy_slug", "taxonomy", "slug"),)

    def __repr__(self) -> str:
        return f"<Term(id={self.id}, taxonomy={self.taxonomy}, slug={self.slug})>"
