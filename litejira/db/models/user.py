from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from litejira.common.enums import UserRole
from litejira.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(String(20), nullable=False, default=UserRole.MEMBER)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Only verified users receive scheduled report emails
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
