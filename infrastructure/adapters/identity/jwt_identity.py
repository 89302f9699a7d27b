import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt

from domain.models.identity import Caller, UserRole
from domain.ports.identity import IdentityProviderPort


class JwtIdentityProvider(IdentityProviderPort):
    """
    Bearer tokens signed with a shared secret. The `sub` claim carries the
    user id, the `role` claim one of HOST, ADMIN or PARTICIPANT.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm
        self.logger = logging.getLogger(__name__)

    def resolve_caller(self, credential: Optional[str]) -> Optional[Caller]:
        if not credential or not self.secret:
            return None

        token = credential
        if token.lower().startswith("bearer "):
            token = token.split(" ", 1)[1].strip()

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            self.logger.debug(f"Rejected token: {e}")
            return None

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            self.logger.debug("Rejected token: 'sub' is not a user id")
            return None

        try:
            role = UserRole(str(payload.get("role", UserRole.PARTICIPANT.value)).upper())
        except ValueError:
            role = UserRole.PARTICIPANT

        return Caller(user_id=user_id, role=role)

    def issue_token(
        self,
        user_id: UUID,
        role: UserRole = UserRole.PARTICIPANT,
        expires_in: timedelta = timedelta(days=7),
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)
