# Bearer-token principal resolution for the HTTP layer
import logging
from typing import Any, Dict, Iterable, Set

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .application.ports.authorization import Privilege, UserPrincipal
from .config import settings
from .utils import decode_jwt_token

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer()


def _privileges_from_names(names: Iterable[str]) -> Set[Privilege]:
    granted = set()
    for name in names:
        privilege = Privilege.from_name(name)
        if privilege is None:
            logger.warning(f"Ignoring unknown privilege in token: {name!r}")
            continue
        granted.add(privilege)
    return granted


def principal_from_claims(payload: Dict[str, Any]) -> UserPrincipal:
    """Build a principal from token claims.

    Privileges come from the ``privileges`` claim plus every privilege
    granted by a role listed in ``roles`` (see ``settings.ROLE_PRIVILEGES``).
    """
    granted = _privileges_from_names(payload.get("privileges") or [])
    for role in payload.get("roles") or []:
        role_privileges = settings.ROLE_PRIVILEGES.get(role)
        if role_privileges is None:
            logger.warning(f"Ignoring unknown role in token: {role!r}")
            continue
        granted |= _privileges_from_names(role_privileges)
    return UserPrincipal.with_privileges(str(payload["sub"]), granted)


def get_current_principal(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> UserPrincipal:
    token = credentials.credentials
    payload = decode_jwt_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    return principal_from_claims(payload)
