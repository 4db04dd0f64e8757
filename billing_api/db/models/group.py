from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column
from billing_api.db.base import Base
from billing_api.db.models._types import BigIntId

class GroupMember(Base):
    __tablename__ = "system_groups"

    group_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey('system_accounts.id', ondelete='CASCADE'), primary_key=True, index=True)


class GroupRight(Base):
    """Feature id (fid) granted to every member of a group."""

    __tablename__ = "system_rights"

    group_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    fid: Mapped[int] = mapped_column(Integer, primary_key=True)

    __table_args__ = (
        Index('ix_system_rights_fid_group', 'fid', 'group_id'),
    )
