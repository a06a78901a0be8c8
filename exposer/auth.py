from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from exposer.config import Settings
from exposer.constants.roles import get_role_capabilities
from exposer.dependencies import get_settings
from exposer.exceptions import ForbiddenError

# Initialize logging
logger = logging.getLogger(__name__)

# Bearer scheme; missing credentials resolve to an anonymous caller
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_EXPIRE_MINUTES = 30


@dataclass(frozen=True)
class Caller:
    """Identity and capability set of whoever issued the current request."""

    subject: Optional[str] = None
    role: Optional[str] = None
    capabilities: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


ANONYMOUS = Caller()


def caller_for_role(subject: str, role: str) -> Caller:
    return Caller(subject=subject, role=role, capabilities=get_role_capabilities(role))


# Function to create an access token with an expiration time
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim in token data.")

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.token_algorithm)


def decode_caller(token: str, settings: Settings) -> Caller:
    """
    Decode a bearer token into a Caller.

    Invalid, expired or incomplete tokens produce the anonymous caller, so
    capability checks further down fail with 403 instead of 401.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.token_algorithm])
    except ExpiredSignatureError:
        logger.warning("Rejected expired access token")
        return ANONYMOUS
    except JWTError as e:
        logger.warning(f"Rejected invalid access token: {e}")
        return ANONYMOUS

    subject = payload.get("sub")
    if subject is None:
        logger.warning("Token is missing 'sub' claim")
        return ANONYMOUS

    return caller_for_role(subject, payload.get("role"))


async def get_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Caller:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    if credentials is None:
        caller = ANONYMOUS
    else:
        caller = decode_caller(credentials.credentials, settings)
    request.state.caller = caller
    return caller


def require_capability(capability: str) -> Callable[..., Caller]:
    async def _caller_with_capability(caller: Caller = Depends(get_caller)) -> Caller:
        """
        Ensure the caller holds the given capability.

        Raises:
            ForbiddenError: If the capability is missing.
        """
        if not caller.can(capability):
            raise ForbiddenError(
                f"Role '{caller.role or 'anonymous'}' does not have access to this resource.",
                required_capability=capability,
            )
        return caller

    return _caller_with_capability
