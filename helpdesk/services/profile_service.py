from __future__ import annotations

import logging

from ..core.errors import NotFoundError, ValidationError
from ..core.identity import Identity, normalize_email
from ..core.permissions import assert_admin
from ..core.roles import Actor, Role, parse_role
from ..models.user import Profile
from .repository import TicketRepository

logger = logging.getLogger(__name__)


def _require_role(raw: str) -> Role:
    role = parse_role(raw)
    if role is None:
        raise ValidationError(f"Invalid role: {raw}")
    return role


class ProfileService:
    def __init__(self, repo: TicketRepository):
        self.repo = repo

    def ensure_profile(self, identity: Identity) -> Profile:
        """
        Create the profile on first sign-in.

        An existing profile keeps its stored role; only contact details coming
        from the identity provider are refreshed.
        """
        existing = self.repo.get_profile(identity.user_id)
        if existing is not None:
            if identity.email and existing.email != identity.email:
                with self.repo.transaction():
                    self.repo.upsert_profile(existing.id, email=identity.email)
            return existing

        role = identity.role or Role.reporter
        with self.repo.transaction():
            profile = self.repo.upsert_profile(
                identity.user_id,
                email=identity.email or "",
                full_name=identity.full_name or "",
                role=role.value,
            )
        logger.info("profile %s created with role %s", profile.id, profile.role)
        return profile

    def get_profile(self, profile_id: str) -> Profile:
        profile = self.repo.get_profile(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def update_own_profile(
        self,
        actor: Actor,
        full_name: str | None = None,
        department: str | None = None,
        phone: str | None = None,
    ) -> Profile:
        fields: dict[str, str | None] = {}
        if full_name is not None:
            full_name = full_name.strip()
            if not full_name:
                raise ValidationError("Full name must not be empty")
            fields["full_name"] = full_name
        if department is not None:
            fields["department"] = department.strip() or None
        if phone is not None:
            fields["phone"] = phone.strip() or None

        profile = self.get_profile(actor.id)
        if fields:
            with self.repo.transaction():
                profile = self.repo.upsert_profile(profile.id, **fields)
        return profile

    def list_profiles(self, actor: Actor, role: str | None = None) -> list[Profile]:
        assert_admin(actor, "list_profiles")
        wanted = _require_role(role).value if role is not None else None
        return self.repo.list_profiles(wanted)

    def set_role(self, actor: Actor, profile_id: str, role: str) -> Profile:
        assert_admin(actor, "set_role")
        new_role = _require_role(role)
        profile = self.get_profile(profile_id)
        with self.repo.transaction():
            profile = self.repo.upsert_profile(profile.id, role=new_role.value)
        logger.info("role of %s set to %s by %s", profile.id, new_role.value, actor.id)
        return profile

    def provision_profile(
        self,
        actor: Actor,
        profile_id: str,
        email: str,
        full_name: str,
        role: str,
        department: str | None = None,
    ) -> Profile:
        """
        Register a profile ahead of the user's first sign-in.

        The role given here is the stored role, so ``ensure_profile`` keeps it
        when the user later logs in with a token carrying a different one.
        """
        assert_admin(actor, "provision_profile")
        new_role = _require_role(role)
        profile_id = (profile_id or "").strip()
        if not profile_id:
            raise ValidationError("Profile id is required")
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Full name is required")
        normalized = normalize_email((email or "").strip())
        if not normalized:
            raise ValidationError(f"Invalid email: {email}")

        with self.repo.transaction():
            if self.repo.get_profile(profile_id) is not None:
                raise ValidationError(f"Profile already exists: {profile_id}")
            profile = self.repo.upsert_profile(
                profile_id,
                email=normalized,
                full_name=full_name,
                role=new_role.value,
                department=(department or "").strip() or None,
            )
        logger.info("profile %s provisioned with role %s by %s", profile.id, profile.role, actor.id)
        return profile
