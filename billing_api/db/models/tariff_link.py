from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column
from billing_api.db.base import Base
from billing_api.db.models._types import BigIntId

class AccountTariffLink(Base):
    """Tariff assignment of an account, guarded by an optimistic-lock version.

    Rows are provisioned out of band with version=1. The only writer is
    TariffLinkStore.conditional_update.
    """

    __tablename__ = "account_tariff_link"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(BigIntId, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False, unique=True, index=True)
    tariff_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1, server_default="1")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # Weak reference: only the id is stored, the login is joined at read time.
    updated_by: Mapped[int | None] = mapped_column(BigIntId, ForeignKey('system_accounts.id', ondelete='SET NULL'), nullable=True)

    __table_args__ = (
        CheckConstraint('version >= 1', name='chk_account_tariff_link_version_positive'),
    )
