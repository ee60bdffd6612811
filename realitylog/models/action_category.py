from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from realitylog.models.base import Base, TimestampMixin, UUIDMixin


class ActionCategory(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "action_categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="#10B981")
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<ActionCategory {self.name}>"
