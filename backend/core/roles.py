"""
Company team roles and the capability flags each role grants by default.

ROLE_PERMISSIONS is keyed by every Role member and each value defines all six
capabilities, so applying overrides on top of a role default can never leave
a flag undefined.
"""
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Mapping

from django.db import models
from rest_framework.exceptions import ValidationError
from rest_framework.fields import BooleanField


class Role(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    HR = 'HR', 'HR'
    RECRUITER = 'RECRUITER', 'Recruiter'
    VIEWER = 'VIEWER', 'Viewer'


@dataclass(frozen=True)
class Capabilities:
    can_create_jobs: bool
    can_edit_jobs: bool
    can_delete_jobs: bool
    can_review_apps: bool
    can_edit_company: bool
    can_manage_team: bool

    @classmethod
    def all(cls, value: bool) -> 'Capabilities':
        return cls(**{f.name: value for f in fields(cls)})

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)

    def with_overrides(self, overrides: Mapping[str, object]) -> 'Capabilities':
        """Return a copy with any known capability keys in ``overrides`` applied.

        Keys may be model field names (``can_review_apps``) or the camelCase
        names used by the API (``canReviewApps``). Values go through DRF's
        boolean parsing, so ``"false"`` and ``0`` mean False; unrecognised values
        raises ValueError.
        """
        changes = {}
        for key, value in overrides.items():
            field_name = API_FIELD_NAMES.get(key, key)
            if field_name not in CAPABILITY_FIELDS:
                continue
            try:
                changes[field_name] = BooleanField().to_internal_value(value)
            except ValidationError:
                raise ValueError(f'{key} must be a boolean') from None
        return replace(self, **changes) if changes else self


CAPABILITY_FIELDS = tuple(f.name for f in fields(Capabilities))

# camelCase request keys -> model field names
API_FIELD_NAMES = {
    'canCreateJobs': 'can_create_jobs',
    'canEditJobs': 'can_edit_jobs',
    'canDeleteJobs': 'can_delete_jobs',
    'canReviewApps': 'can_review_apps',
    'canEditCompany': 'can_edit_company',
    'canManageTeam': 'can_manage_team',
}

ROLE_PERMISSIONS: Dict[Role, Capabilities] = {
    Role.ADMIN: Capabilities.all(True),
    Role.HR: Capabilities(
        can_create_jobs=True,
        can_edit_jobs=True,
        can_delete_jobs=False,
        can_review_apps=True,
        can_edit_company=False,
        can_manage_team=False,
    ),
    Role.RECRUITER: Capabilities(
        can_create_jobs=True,
        can_edit_jobs=True,
        can_delete_jobs=False,
        can_review_apps=True,
        can_edit_company=False,
        can_manage_team=False,
    ),
    Role.VIEWER: Capabilities.all(False),
}


def parse_role(value) -> Role:
    """Coerce a request value into a Role, raising ValueError when unknown."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        raise ValueError(f'Invalid role: {value!r}')
    return Role(value.strip().upper())


def default_capabilities(role) -> Capabilities:
    return ROLE_PERMISSIONS[parse_role(role)]
