"""
Todo API - Abstract Identity Provider Interface
===============================================

What:  The contract for turning a bearer token into a verified caller identity.
How:   Concrete implementations inherit from IdentityProvider and implement
       verify_token(). The routes only ever see a CallerIdentity.
Who:   Called by the auth dependencies in todo_api.dependencies.

Implementations:
    - JWTIdentityService: verifies provider-issued session JWTs locally
      with the provider's public key (no network round trip per request)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CallerIdentity:
    """
    A verified caller.

    Attributes:
        external_id: The provider's user id (maps to User.external_auth_id)
        session_id:  Provider session id, when the token carries one
        claims:      The full verified claim set, for logging/debugging
    """
    external_id: str
    session_id: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


class IdentityProvider(ABC):
    """
    Abstract interface for bearer-token verification.

    Contract:
        - verify_token() returns a CallerIdentity or raises UnauthorizedError
        - It never returns an identity with an empty external_id
        - Implementation-specific errors are wrapped in UnauthorizedError
    """

    @abstractmethod
    def verify_token(self, token: str) -> CallerIdentity:
        """
        Verify a bearer token issued by the identity provider.

        Args:
            token: The raw token from `Authorization: Bearer <token>`.

        Returns:
            CallerIdentity for the token's subject.

        Raises:
            UnauthorizedError: The token is malformed, expired, signed with
                the wrong key, or fails an issuer/audience/party check.
        """
        ...
