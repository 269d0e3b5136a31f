from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

# Keys written by the login flow, in lookup order.
TOKEN_KEYS: tuple[str, ...] = ("access_token", "token", "authToken")


@dataclass(frozen=True, slots=True)
class Credentials:
    """Bearer token handed explicitly to the entity store client."""

    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def authorization_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


ANONYMOUS = Credentials()


def resolve_credentials(store: Mapping[str, object] | None) -> Credentials:
    """Pick the first non-empty token from a login-flow credential store."""

    if not store:
        return ANONYMOUS
    for key in TOKEN_KEYS:
        value = store.get(key)
        if isinstance(value, str) and value.strip():
            return Credentials(token=value.strip())
    return ANONYMOUS
