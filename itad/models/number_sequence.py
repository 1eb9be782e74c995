from sqlalchemy import Column, Integer, String

from itad.database import Base


class NumberSequence(Base):
    """Last issued value per number prefix, e.g. ``INV-2026``."""

    __tablename__ = "number_sequences"

    prefix = Column(String, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
