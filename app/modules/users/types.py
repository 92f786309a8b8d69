from typing import TypedDict

from app.modules.users.models import User


class FindOrCreateResult(TypedDict):
    """Result of finding or creating a user."""
    user: User
    is_existing_user: bool
