from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from salesforce_claims.claims_errors import AssertionSigningError

ASSERTION_LIFETIME = timedelta(minutes=3)


@dataclass(frozen=True)
class SigningIdentity:
    private_key: str
    issuer: str
    subject: str
    audience: str
    algorithm: str = "RS256"


def build_assertion(identity: SigningIdentity) -> str:
    """Sign a short-lived JWT-Bearer grant assertion for the service identity."""
    now = datetime.now(timezone.utc)
    payload = {
        "iss": identity.issuer,
        "aud": identity.audience,
        "sub": identity.subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ASSERTION_LIFETIME).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    try:
        return jwt.encode(payload, identity.private_key, algorithm=identity.algorithm)
    except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
        raise AssertionSigningError(f"Failed to sign Salesforce assertion: {e}") from e
