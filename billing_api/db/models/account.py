from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from billing_api.db.base import Base
from billing_api.db.models._types import BigIntId

class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
