"""Per-user panel credentials."""
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class UserSettings(BaseModel):
    """
    Panel connection settings owned by exactly one user.

    Attributes:
        website_url: Panel base URL, e.g. https://panel.example.com
        api_key: Sent as X-Api-Key on every panel call
        auth_user: Sent as X-Auth-User on every panel call
    """
    __tablename__ = "user_settings"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    website_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    api_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    auth_user: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<UserSettings(user_id={self.user_id}, website_url={self.website_url})>"
