"""
Session token issuance.

A token is an HS256 JWT carrying only ``user_id`` and ``username``. It has no
``exp`` claim; lifetime and revocation belong to whatever verifies it.
"""
from collections.abc import Mapping

import jwt
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

TOKEN_CLAIMS = ("user_id", "username")


class TokenIssuer:
    def __init__(self, secret_key, algorithm="HS256"):
        if not isinstance(secret_key, str) or not secret_key.strip():
            raise ImproperlyConfigured("A non-empty JWT secret key is required to issue tokens.")
        self.secret_key = secret_key
        self.algorithm = algorithm

    def payload_for(self, user):
        """Claims for ``user``, a mapping or an object with user_id/username."""
        if isinstance(user, Mapping):
            return {claim: user.get(claim) for claim in TOKEN_CLAIMS}
        return {claim: getattr(user, claim, None) for claim in TOKEN_CLAIMS}

    def issue(self, user):
        """Return a signed JWT from user data."""
        return jwt.encode(self.payload_for(user), self.secret_key, algorithm=self.algorithm)


def create_token(user):
    issuer = TokenIssuer(
        getattr(settings, "JWT_SECRET_KEY", None),
        algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
    )
    return issuer.issue(user)
