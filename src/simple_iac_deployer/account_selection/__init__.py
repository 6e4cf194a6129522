"""Account selection exports."""

from .account_models import Account
from .account_selector import AccountSelector

__all__ = ["Account", "AccountSelector"]
