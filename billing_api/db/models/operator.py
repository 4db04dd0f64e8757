from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column
from billing_api.db.base import Base
from billing_api.db.models._types import BigIntId

class Operator(Base):
    """System account of a billing operator (the identity behind a JWT)."""

    __tablename__ = "system_accounts"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
