from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from realitylog.models.base import Base, TimestampMixin, UUIDMixin


class Participant(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "participants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Participant {self.name}>"
