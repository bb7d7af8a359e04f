"""AuthProvider protocol."""

from typing import Protocol, runtime_checkable

from ..entities.identity import Identity


@runtime_checkable
class AuthProvider(Protocol):
    """Issues and validates opaque bearer tokens."""

    def issue_token(self, identity: Identity) -> str:
        """Issue a token for an identity.

        Args:
            identity: The caller to issue a token for.

        Returns:
            str: An opaque token.
        """
        ...

    def verify(self, token: str) -> Identity:
        """Validate a token.

        Args:
            token: The token presented by a caller.

        Returns:
            Identity: The identity the token was issued for.

        Raises:
            Unauthorized: If the token is missing, malformed or expired.
        """
        ...
