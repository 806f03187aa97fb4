"""
Identity resolution: map a verified external profile onto a local user.
"""
import logging
from typing import Any, Dict

from planner.database import PlannerDatabase
from planner.exceptions import ConflictError, UserNotFoundError
from planner.models.user_models import ExternalProfile
from planner.storage.repositories import UserRepository

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Find, link or create the local user for an external identity."""

    def __init__(self, db: PlannerDatabase):
        self.db = db
        self.users = UserRepository(db)

    def resolve_or_create(self, profile: ExternalProfile) -> Dict[str, Any]:
        """
        Resolve a profile to a user record. First match wins:

        1. Existing user with this external_id: refresh name, picture and
           verified. The stored email is left as is.
        2. Existing user with this email and no external_id yet: link it and
           refresh picture and verified.
        3. Otherwise create a new user.

        A blank name or a missing picture in the profile never overwrites
        what is already stored.

        Raises:
            ConflictError: If the email belongs to a user linked to a
                different external identity, or a concurrent request created
                the same user first
            UserNotFoundError: If the matched user was deleted before the
                refresh was written
        """
        user = self.users.get_by_external_id(profile.external_id)
        if user:
            return self._refresh(user["id"], profile, name=True)

        user = self.users.get_by_email(profile.email)
        if user:
            if user["external_id"] and user["external_id"] != profile.external_id:
                logger.warning(f"Refusing to relink user {user['id']} to a different external identity")
                raise ConflictError(
                    "Email is already linked to a different account",
                    context={"email": profile.email}
                )
            linked = self._refresh(user["id"], profile, external_id=profile.external_id)
            logger.info(f"Linked external identity to existing user {user['id']}")
            return linked

        user = self.users.create(
            email=profile.email,
            name=profile.name or profile.email,
            external_id=profile.external_id,
            picture=profile.picture,
            verified=profile.verified,
        )
        logger.info(f"Created user {user['id']} from external identity")
        return user

    def _refresh(self, user_id: str, profile: ExternalProfile, name: bool = False, **changes: Any) -> Dict[str, Any]:
        """Write profile fields the provider actually supplied."""
        changes["verified"] = profile.verified
        if name and profile.name:
            changes["name"] = profile.name
        if profile.picture is not None:
            changes["picture"] = profile.picture

        user = self.users.update(user_id, changes)
        if not user:
            raise UserNotFoundError(user_id)
        return user
