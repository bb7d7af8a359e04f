"""JWT implementation of the AuthProvider protocol."""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from jose import JWTError, jwt

from ..domain.entities.identity import Identity, Role
from ..domain.errors import Unauthorized
from ..domain.interfaces.auth_provider import AuthProvider

logger = logging.getLogger(__name__)


@dataclass
class DevUser:
    """Account in the development user directory."""

    id: str
    email: str
    role: Role
    password: str


def default_dev_users(password: str) -> List[DevUser]:
    return [
        DevUser(id="t1", email="teacher@example.com", role=Role.TEACHER, password=password),
        DevUser(id="s1", email="student@example.com", role=Role.STUDENT, password=password),
    ]


class JwtAuthProvider(AuthProvider):
    """Signs identities into HS256 JWTs and verifies them.

    Also carries a small in-memory user directory so the service can issue
    tokens on its own during development. Real deployments swap the whole
    provider for their identity service.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=24),
        users: Optional[List[DevUser]] = None,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in
        self._users: Dict[str, DevUser] = {user.email: user for user in users or []}

    def issue_token(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": identity.id,
            "email": identity.email,
            "role": Role(identity.role).value,
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        if not token:
            raise Unauthorized()
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return Identity(id=claims["sub"], email=claims.get("email"), role=claims["role"])
        except (JWTError, KeyError, ValueError) as e:
            logger.info(f"Rejected token: {e}")
            raise Unauthorized() from e

    def authenticate(self, email: str, password: str, role: Optional[str] = None) -> Identity:
        """Check credentials against the user directory.

        Raises:
            Unauthorized: If no user matches.
        """
        user = self._users.get(email or "")
        if user is None or (role is not None and user.role.value != role):
            raise Unauthorized("invalid")
        if not hmac.compare_digest(user.password.encode(), (password or "").encode()):
            raise Unauthorized("invalid")
        return Identity(id=user.id, email=user.email, role=user.role)
