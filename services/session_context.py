"""
Request-scoped session context.

Route handlers never read or write the cookie session directly. They receive
a SessionContext built from it, mutate the context through the OTP
authenticator, and write it back with write_to().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

PENDING_KEY = "pending_user_id"
AUTHENTICATED_KEY = "user_id"


@dataclass
class SessionContext:
    """Two independent slots: the account awaiting OTP verification and the signed-in account."""

    pending_account_id: Optional[int] = None
    authenticated_account_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated_account_id is not None

    @classmethod
    def from_session(cls, session: MutableMapping[str, Any]) -> "SessionContext":
        return cls(
            pending_account_id=_as_int(session.get(PENDING_KEY)),
            authenticated_account_id=_as_int(session.get(AUTHENTICATED_KEY)),
        )

    def write_to(self, session: MutableMapping[str, Any]) -> None:
        _store(session, PENDING_KEY, self.pending_account_id)
        _store(session, AUTHENTICATED_KEY, self.authenticated_account_id)


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _store(session: MutableMapping[str, Any], key: str, value: Optional[int]) -> None:
    if value is None:
        session.pop(key, None)
    else:
        session[key] = value
