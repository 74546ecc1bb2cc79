"""
Todo API - JWT Identity Service
===============================

What:  Verifies identity-provider session tokens (JWTs) with python-jose.
How:   Checks the signature against AUTH_JWT_KEY using the configured
       algorithms, then the standard claims (exp, nbf, iat), the issuer and
       audience when configured, and finally the `azp` (authorized party)
       claim against AUTH_AUTHORIZED_PARTIES.
Who:   Instantiated once as `identity_service`; used by the auth dependency.

Settings are read on every call, so a key rotated through the environment
(or patched in tests) takes effect without rebuilding the service.
"""

import logging
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from todo_api.config import Settings, settings as app_settings
from todo_api.exceptions import UnauthorizedError
from todo_api.services.identity_base import CallerIdentity, IdentityProvider

logger = logging.getLogger(__name__)


class JWTIdentityService(IdentityProvider):
    """
    Local verification of provider-issued JWTs.

    Failure modes, all mapped to UnauthorizedError (401):
        - verification key not configured
        - malformed token / bad signature
        - expired token
        - issuer or audience mismatch
        - `azp` not in the configured authorized parties
        - missing `sub` claim
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or app_settings

    def verify_token(self, token: str) -> CallerIdentity:
        cfg = self.settings
        if not cfg.auth_jwt_key:
            logger.error("AUTH_JWT_KEY is not configured; rejecting all tokens")
            raise UnauthorizedError(message="Authentication is not configured on the server")

        claims = self._decode(token, cfg)

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise UnauthorizedError(message="Token has no subject")

        self._check_authorized_party(claims, cfg)

        return CallerIdentity(
            external_id=subject,
            session_id=claims.get("sid"),
            claims=claims,
        )

    def _decode(self, token: str, cfg: Settings) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                cfg.auth_jwt_key,
                algorithms=cfg.auth_jwt_algorithms_list,
                audience=cfg.auth_audience,
                issuer=cfg.auth_issuer,
                options={"verify_aud": cfg.auth_audience is not None},
            )
        except ExpiredSignatureError:
            raise UnauthorizedError(message="Session token has expired")
        except JWTClaimsError as e:
            logger.info("Token claims rejected: %s", str(e))
            raise UnauthorizedError(message="Session token claims are invalid")
        except JWTError as e:
            logger.info("Token verification failed: %s", str(e))
            raise UnauthorizedError(message="Invalid session token")

    @staticmethod
    def _check_authorized_party(claims: Dict[str, Any], cfg: Settings) -> None:
        allowed = cfg.auth_authorized_parties_list
        azp = claims.get("azp")
        # Tokens without azp are accepted; the provider omits it for non-browser clients
        if allowed and azp is not None and azp not in allowed:
            logger.warning("Rejected token from unauthorized party %s", azp)
            raise UnauthorizedError(message="Token was issued to an unauthorized party")


# ── Singleton Instance ────────────────────────────────────────────────────
identity_service = JWTIdentityService()
