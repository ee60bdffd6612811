from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from realitylog.models.base import Base, TimestampMixin, UUIDMixin


class Location(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="#3B82F6")

    def __repr__(self) -> str:
        return f"<Location {self.name}>"
