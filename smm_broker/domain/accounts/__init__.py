"""Account domain services and models."""

from .models import Account
from .service import AccountService
from .exceptions import AccountError, AccountNotFoundError

__all__ = [
    "Account",
    "AccountService",
    "AccountError",
    "AccountNotFoundError",
]
