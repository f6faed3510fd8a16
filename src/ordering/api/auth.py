"""Caller identity for the Ordering API.

Authentication happens upstream; the gateway forwards the authenticated
user's id and role as headers.
"""

from dataclasses import dataclass

from fastapi import Header

from ordering.errors import Forbidden, Unauthenticated


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default="user"),
) -> Caller:
    if not x_user_id:
        raise Unauthenticated("Authentication required")
    return Caller(user_id=x_user_id, role=x_user_role)


def require_admin(caller: Caller) -> None:
    if not caller.is_admin:
        raise Forbidden("Admin access required")
