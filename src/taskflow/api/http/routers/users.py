"""Public account lookup by identifier."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from src.taskflow.api.http.deps import get_account_resolver
from src.taskflow.core.models.account_view import AccountView
from src.taskflow.core.services import AccountResolver

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def list_users(
    ids: str | None = Query(default=None, description="Comma-separated public ids"),
    resolver: AccountResolver = Depends(get_account_resolver),
) -> list[dict[str, Any]]:
    """Batch lookup; unknown or malformed ids are skipped, order is preserved."""
    return [AccountView.from_account(a).to_response() for a in resolver.resolve_many(ids)]


@router.get("/{public_id}")
def get_user(
    public_id: str,
    resolver: AccountResolver = Depends(get_account_resolver),
) -> dict[str, Any]:
    account = resolver.resolve_by_public_id(public_id)
    return AccountView.from_account(account).to_response()
