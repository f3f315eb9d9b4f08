from dataclasses import FrozenInstanceError

import pytest

from core.roles import (
    API_FIELD_NAMES,
    CAPABILITY_FIELDS,
    ROLE_PERMISSIONS,
    Capabilities,
    Role,
    default_capabilities,
    parse_role,
)


def test_every_role_has_a_complete_capability_record():
    assert set(ROLE_PERMISSIONS) == set(Role)
    for caps in ROLE_PERMISSIONS.values():
        assert set(caps.as_dict()) == set(CAPABILITY_FIELDS)


@pytest.mark.parametrize('role,expected', [
    (Role.ADMIN, (True, True, True, True, True, True)),
    (Role.HR, (True, True, False, True, False, False)),
    (Role.RECRUITER, (True, True, False, True, False, False)),
    (Role.VIEWER, (False, False, False, False, False, False)),
])
def test_role_defaults_match_table(role, expected):
    caps = ROLE_PERMISSIONS[role]
    assert tuple(getattr(caps, name) for name in CAPABILITY_FIELDS) == expected


def test_overrides_accept_api_and_field_names():
    caps = ROLE_PERMISSIONS[Role.VIEWER].with_overrides({'canReviewApps': True, 'can_edit_jobs': True, 'role': 'HR'})
    assert caps.can_review_apps is True
    assert caps.can_edit_jobs is True
    assert caps.can_manage_team is False
    # the shared default is untouched
    assert ROLE_PERMISSIONS[Role.VIEWER].can_review_apps is False


def test_overrides_without_capability_keys_return_same_record():
    caps = ROLE_PERMISSIONS[Role.HR]
    assert caps.with_overrides({'name': 'x'}) is caps


@pytest.mark.parametrize('base, raw, expected', [
    (Role.ADMIN, 'false', False),
    (Role.ADMIN, '0', False),
    (Role.ADMIN, 0, False),
    (Role.VIEWER, 'true', True),
    (Role.VIEWER, 1, True),
])
def test_override_strings_are_parsed_not_truthy(base, raw, expected):
    caps = ROLE_PERMISSIONS[base].with_overrides({'canReviewApps': raw})
    assert caps.can_review_apps is expected


@pytest.mark.parametrize('raw', ['maybe', None, [], 'yes please'])
def test_override_rejects_non_boolean(raw):
    with pytest.raises(ValueError, match='canReviewApps'):
        ROLE_PERMISSIONS[Role.VIEWER].with_overrides({'canReviewApps': raw})


def test_capabilities_are_immutable():
    caps = Capabilities.all(False)
    with pytest.raises(FrozenInstanceError):
        caps.can_manage_team = True


def test_api_field_names_cover_every_capability():
    assert sorted(API_FIELD_NAMES.values()) == sorted(CAPABILITY_FIELDS)


def test_parse_role_is_case_insensitive():
    assert parse_role(' recruiter ') is Role.RECRUITER
    assert default_capabilities('hr') == ROLE_PERMISSIONS[Role.HR]


@pytest.mark.parametrize('value', ['OWNER', '', None, 3])
def test_parse_role_rejects_unknown_values(value):
    with pytest.raises(ValueError):
        parse_role(value)
