"""Authentication & capability enforcement (token-based).

Design:
- Bearer JWT tokens (HS256) issued by the identity provider.
- Claims carry the full identity: sub, email, global_role (legacy `role` is
  accepted) and company_roles. Nothing is fetched or cached server-side.
- Default deny. Endpoints declare the capability they need.
- Denials are a single, uniform 403 whatever the cause.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException, Request, status

from dashboard.core.env import get_jwt_secret
from dashboard.security.resolver import AuthorizationDenied, Capability, require
from dashboard.security.roles import DuplicateCompanyAssignment, UserIdentity


logger = logging.getLogger("expdash.security")


class AuthError(HTTPException):
    pass


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _hmac_sha256(key: bytes, msg: bytes) -> bytes:
    return hmac.new(key, msg, hashlib.sha256).digest()


def _unauthorized(detail: str) -> AuthError:
    return AuthError(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_and_verify_jwt(token: str) -> dict[str, Any]:
    """Verify HS256 JWT signature and minimal standard claims.

    Required claims:
    - sub: user id
    Optional:
    - email, global_role (or role), company_roles
    - exp: unix epoch seconds
    """
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise _unauthorized("Invalid token format.") from e

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_sig = _b64url_encode(_hmac_sha256(get_jwt_secret(), signing_input))
    if not hmac.compare_digest(expected_sig, sig_b64):
        raise _unauthorized("Invalid token signature.")

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as e:
        raise _unauthorized("Invalid token encoding.") from e

    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise _unauthorized("Invalid token encoding.")
    if header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise _unauthorized("Unsupported token header.")

    exp = payload.get("exp")
    if exp is not None:
        try:
            exp_i = int(exp)
        except (TypeError, ValueError) as e:
            raise _unauthorized("Invalid exp claim.") from e
        if int(time.time()) >= exp_i:
            raise _unauthorized("Token expired.")

    if not payload.get("sub"):
        raise _unauthorized("Missing required claims.")

    return payload


def identity_from_claims(claims: dict[str, Any]) -> UserIdentity:
    try:
        return UserIdentity.from_claims(claims)
    except DuplicateCompanyAssignment as e:
        raise _unauthorized("Invalid company_roles claim.") from e


def get_current_user(request: Request) -> UserIdentity:
    """Extract and validate the bearer token, returning the caller's identity."""
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise _unauthorized("Missing bearer token.")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise _unauthorized("Missing bearer token.")

    return identity_from_claims(decode_and_verify_jwt(token))


def forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")


def require_capability(capability: Capability) -> Callable[..., UserIdentity]:
    """FastAPI dependency factory enforcing one capability.

    Scoped capabilities read `company_id` from the path or the query string;
    a missing or malformed id denies exactly like a missing role.
    """

    def _dep(request: Request, user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
        company_id: Optional[str] = request.path_params.get("company_id", request.query_params.get("company_id"))
        try:
            require(user, capability, company_id)
        except AuthorizationDenied as e:
            logger.info(
                json.dumps(
                    {
                        "event": "authorization_denied",
                        "user_id": user.id,
                        "capability": e.capability,
                        "reason": e.reason,
                        "path": request.url.path,
                    }
                )
            )
            raise forbidden() from e
        return user

    return _dep
