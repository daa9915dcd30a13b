# auth/security.py
from typing import NamedTuple, Optional, Tuple

import jwt
from fastapi import Header, HTTPException, status

from util import config

ROLE_USER = "ROLE_USER"
ROLE_ADMIN = "ROLE_ADMIN"


class Principal(NamedTuple):
    uid: int
    roles: Tuple[str, ...]


def decode_token(authorization: Optional[str] = Header(None)) -> Principal:
    """
    Authorization: Bearer <jwt>, HS256 signed with SECRET_KEY.
    Roles come from the `roles` claim (or `authorities`, as the user service issues them).
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing bearer token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=["HS256"])
        uid = int(payload.get("uid"))
    except (jwt.PyJWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid token")
    roles = payload.get("roles") or payload.get("authorities") or []
    if isinstance(roles, str):
        roles = [roles]
    return Principal(uid=uid, roles=tuple(roles))


def require_role(*allowed: str):
    """Dependency factory: the caller must hold at least one of `allowed`."""

    def check(authorization: Optional[str] = Header(None)) -> Principal:
        principal = decode_token(authorization)
        if not set(allowed) & set(principal.roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail="requires " + " or ".join(allowed))
        return principal

    return check
