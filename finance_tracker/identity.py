"""
Caller identity and the capability policy used by every workflow operation.

Authentication itself happens upstream; the auth layer forwards the resolved
user id and role in the ``X-User-Id`` / ``X-User-Role`` headers.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from fastapi import Header, HTTPException, status


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role = Role.USER


Policy = Callable[[Identity], bool]


def can_administer(identity: Identity) -> bool:
    """True if the caller may perform admin-only actions"""
    return identity.role == Role.ADMIN


async def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    """Dependency that builds the identity forwarded by the auth layer"""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        role = Role(x_user_role) if x_user_role else Role.USER
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown role")

    return Identity(user_id=x_user_id, role=role)


def get_policy() -> Policy:
    """Dependency returning the capability policy; overridable in tests"""
    return can_administer
