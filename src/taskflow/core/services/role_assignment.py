"""One-time role assignment.

``pending -> customer`` and ``pending -> executor`` are the only
transitions. Re-requesting the current role succeeds without a write.
"""

from loguru import logger

from src.taskflow.core.errors import (
    AccountNotFoundError,
    InvalidRoleError,
    RoleConflictError,
)
from src.taskflow.core.services.identity_store import IdentityStore, RoleUpdateOutcome
from src.taskflow.entities.core.account import ASSIGNABLE_ROLES, Role


def parse_assignable_role(value: object) -> Role:
    """Accept exactly ``customer`` or ``executor`` (surrounding blanks ignored)."""
    raw = value.strip() if isinstance(value, str) else ""
    try:
        role = Role(raw)
    except ValueError as exc:
        raise InvalidRoleError(f"invalid role {value!r}") from exc
    if role not in ASSIGNABLE_ROLES:
        raise InvalidRoleError(f"role {raw!r} cannot be assigned")
    return role


class RoleAssignmentService:
    def __init__(self, store: IdentityStore):
        self._store = store

    def assign(self, account_id: str, requested_role: object) -> Role:
        """Set the account's role once.

        Returns:
            The account's role after the call (always ``requested_role``)

        Raises:
            InvalidRoleError: requested role is not customer/executor
            AccountNotFoundError: no such account
            RoleConflictError: a different role is already set
        """
        role = parse_assignable_role(requested_role)

        account = self._store.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"account {account_id} not found")

        if account.role == role:
            return role

        if account.role != Role.PENDING:
            raise RoleConflictError(account.role.value)

        outcome = self._store.set_role_if_matches(account_id, Role.PENDING, role)
        if outcome is RoleUpdateOutcome.SUCCESS:
            logger.info("Account {} role set to {}", account_id, role.value)
            return role
        if outcome is RoleUpdateOutcome.NOT_FOUND:
            raise AccountNotFoundError(f"account {account_id} not found")

        # Lost the race; report whatever the winner wrote
        current = self._store.find_by_id(account_id)
        if current is None:
            raise AccountNotFoundError(f"account {account_id} not found")
        if current.role == role:
            return role
        logger.info(
            "Role assignment conflict for account {}: wanted {}, stored {}",
            account_id,
            role.value,
            current.role.value,
        )
        raise RoleConflictError(current.role.value)
