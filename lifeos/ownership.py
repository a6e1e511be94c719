import logging

from .errors import Forbidden, NotFound
from .models import db

logger = logging.getLogger(__name__)


def assert_owned(resource, user, label="Record"):
    if resource is None:
        raise NotFound(f"{label} not found")
    if resource.author_id != user.id:
        logger.error(f"Unauthorized access to {label.lower()} {resource.id} by user {user.id}")
        raise Forbidden()
    return resource


def get_owned(model, id, user):
    """Load ``model`` by primary key and make sure ``user`` owns it."""
    return assert_owned(db.session.get(model, id), user, label=model.__name__)
