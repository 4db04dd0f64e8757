from billing_api.db.base import Base
from .operator import Operator
from .group import GroupMember, GroupRight
from .account import Account
from .tariff_link import AccountTariffLink

__all__ = [
    "Base",
    "Operator",
    "GroupMember",
    "GroupRight",
    "Account",
    "AccountTariffLink",
]
