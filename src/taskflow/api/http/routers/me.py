"""Endpoints acting on the calling account."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.taskflow.api.http.deps import (
    get_current_account,
    get_identity_store,
    get_role_assignment_service,
)
from src.taskflow.core.errors import AccountNotFoundError
from src.taskflow.core.models.account_view import AccountView
from src.taskflow.core.services import IdentityStore, RoleAssignmentService
from src.taskflow.entities.core.account import Account, ProfileFields

router = APIRouter(prefix="/api/me", tags=["me"])


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; blank or missing fields leave stored values alone."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    username: str | None = None
    photo_url: str | None = Field(default=None, alias="photoUrl")


class RoleRequest(BaseModel):
    role: Any = None


@router.get("")
def get_me(account: Account = Depends(get_current_account)) -> dict[str, Any]:
    return AccountView.from_account(account).to_response()


@router.patch("")
def update_me(
    body: ProfileUpdateRequest,
    account: Account = Depends(get_current_account),
    store: IdentityStore = Depends(get_identity_store),
) -> dict[str, Any]:
    profile = ProfileFields(
        full_name=body.full_name, username=body.username, photo_url=body.photo_url
    )
    updated = store.update_profile(account.id, profile)
    if updated is None:
        raise AccountNotFoundError(f"account {account.id} not found")
    return AccountView.from_account(updated).to_response()


@router.patch("/role")
def set_my_role(
    body: RoleRequest,
    account: Account = Depends(get_current_account),
    role_service: RoleAssignmentService = Depends(get_role_assignment_service),
) -> dict[str, Any]:
    """Choose customer or executor, once.

    409 ``{"error": "role_already_set", "role": <stored>}`` when a different
    role was already chosen.
    """
    role = role_service.assign(account.id, body.role)
    return {"ok": True, "role": role.value}
