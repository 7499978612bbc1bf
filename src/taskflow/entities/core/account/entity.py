"""Account domain entity."""

from enum import Enum

from pydantic import BaseModel, Field

from src.taskflow.entities.core._base import Entity


class Role(str, Enum):
    """Account role. ``pending`` until the one-time assignment happens."""

    PENDING = "pending"
    CUSTOMER = "customer"
    EXECUTOR = "executor"


ASSIGNABLE_ROLES = frozenset({Role.CUSTOMER, Role.EXECUTOR})


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProfileFields(BaseModel):
    """Mutable profile attributes of an account. Every field is optional."""

    full_name: str | None = Field(default=None, description="Display name")
    username: str | None = Field(default=None, description="Telegram handle")
    photo_url: str | None = Field(default=None, description="Avatar reference")

    @classmethod
    def from_login(
        cls,
        first_name: str | None = None,
        last_name: str | None = None,
        username: str | None = None,
        photo_url: str | None = None,
    ) -> "ProfileFields":
        """Build profile fields from the login widget's name parts."""
        parts = [p.strip() for p in (first_name, last_name) if p and p.strip()]
        return cls(
            full_name=" ".join(parts) or None,
            username=username,
            photo_url=photo_url,
        )

    def present_fields(self) -> dict[str, str]:
        """Fields carrying a non-empty value, stripped."""
        values = {}
        for name in type(self).model_fields:
            value = _present(getattr(self, name))
            if value is not None:
                values[name] = value
        return values

    def merged_over(self, existing: "ProfileFields") -> "ProfileFields":
        """Field-by-field merge: keep ``existing`` unless this side has a value."""
        return existing.model_copy(update=self.present_fields())


class Account(Entity):
    """Internal account, optionally bound to a Telegram user id."""

    telegram_user_id: str | None = Field(
        default=None, description="External (Telegram) identity, if any"
    )
    role: Role = Field(default=Role.PENDING, description="Account role")
    full_name: str | None = Field(default=None, description="Display name")
    username: str | None = Field(default=None, description="Telegram handle")
    photo_url: str | None = Field(default=None, description="Avatar reference")

    @property
    def profile(self) -> ProfileFields:
        return ProfileFields(
            full_name=self.full_name,
            username=self.username,
            photo_url=self.photo_url,
        )
