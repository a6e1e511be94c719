import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request

from .errors import NotFound, Unauthenticated
from .identity import find_user, resolve_user

logger = logging.getLogger(__name__)

READ_METHODS = ("GET", "HEAD", "OPTIONS")


def decode_token(token):
    audience = current_app.config.get("JWT_AUDIENCE")
    return jwt.decode(
        token,
        current_app.config["JWT_SECRET_KEY"],
        algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        audience=audience,
        options={"verify_aud": audience is not None, "require": ["sub"]},
    )


def bearer_token():
    token = request.headers.get("Authorization")
    if not token:
        return None
    if token.startswith("Bearer "):
        token = token[7:]
    return token.strip() or None


# JWT middleware
def token_required(f):
    """Authenticate the request and pass the internal User as the first argument.

    Reads only look the user up (404 when it does not exist yet); writes
    provision it through the identity resolver.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if not token:
            logger.error("Token missing in request")
            raise Unauthenticated("Token required")
        try:
            payload = decode_token(token)
        except jwt.ExpiredSignatureError:
            logger.error("Token expired")
            raise Unauthenticated("Token expired")
        except jwt.InvalidTokenError as e:
            logger.error(f"Invalid token: {str(e)}")
            raise Unauthenticated("Invalid token")

        external_id = payload["sub"]
        if request.method in READ_METHODS:
            user = find_user(external_id)
            if not user:
                logger.error(f"User not found for principal {external_id}")
                raise NotFound("User not found")
        else:
            user = resolve_user(external_id, payload)
        g.user = user
        return f(user, *args, **kwargs)
    return decorated


# Generate JWT
def generate_token(external_id, email, expires_in=timedelta(hours=1), **claims):
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(external_id),
        "email": email,
        "exp": now + expires_in,
        "iat": now,
        **claims,
    }
    audience = current_app.config.get("JWT_AUDIENCE")
    if audience:
        payload["aud"] = audience
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )
