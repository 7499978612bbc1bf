"""Account entity module.

- Account / ProfileFields / Role: domain models
- AccountTable: database persistence model
- AccountRepository: data access layer
"""

from .entity import ASSIGNABLE_ROLES, Account, ProfileFields, Role
from .repository import AccountRepository
from .table import AccountTable

__all__ = [
    "ASSIGNABLE_ROLES",
    "Account",
    "AccountRepository",
    "AccountTable",
    "ProfileFields",
    "Role",
]
