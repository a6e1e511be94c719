"""Map an external identity-provider principal onto an internal User row."""
import logging

from sqlalchemy.exc import IntegrityError

from .errors import IdentityError, Unauthenticated
from .models import db, User

logger = logging.getLogger(__name__)

PROFILE_CLAIMS = {
    "first_name": "given_name",
    "last_name": "family_name",
    "profile_image": "picture",
}


def primary_email(claims):
    email = (claims or {}).get("email")
    if isinstance(email, str):
        email = email.strip().lower()
    return email or None


def find_user(external_id):
    if not external_id:
        raise Unauthenticated()
    return User.query.filter_by(external_id=external_id).first()


def find_user_by_email(email):
    return User.query.filter_by(email=email).first()


def resolve_user(external_id, claims):
    """Return the User for ``external_id``, creating or reconciling it on first sight.

    Lookup order: external id, then email (attaching the external id to the
    existing row), then a fresh insert. Performs at most one write. An email
    claim is only needed when no row matches the external id.
    """
    user = find_user(external_id)
    if user:
        return user

    claims = claims or {}
    email = primary_email(claims)
    if not email:
        logger.error(f"Principal {external_id} has no usable email")
        raise IdentityError("MissingEmail")

    user = find_user_by_email(email)
    if user:
        user.external_id = external_id
        for field, claim in PROFILE_CLAIMS.items():
            if claims.get(claim) is not None:
                setattr(user, field, claims[claim])
        db.session.commit()
        logger.info(f"Attached principal {external_id} to existing user {user.id}")
        return user

    user = User(external_id=external_id, email=email)
    for field, claim in PROFILE_CLAIMS.items():
        setattr(user, field, claims.get(claim))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent first request inserted the same principal
        db.session.rollback()
        user = find_user(external_id) or find_user_by_email(email)
        if user is None:
            raise
        logger.debug(f"User for principal {external_id} created concurrently, reusing {user.id}")
        return user
    logger.info(f"Created user {user.id} for principal {external_id}")
    return user
