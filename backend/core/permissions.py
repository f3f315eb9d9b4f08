"""
Who may act for a company, and with which capabilities.

A user acts for a company either as its owner (every capability) or as an
ACCEPTED team member linked to their account (that member's flags).
"""
from dataclasses import dataclass
from typing import Optional

from rest_framework import permissions, status
from rest_framework.response import Response

from core.models import Company, TeamMember, UserAccount
from core.roles import Capabilities


@dataclass(frozen=True)
class CompanyActor:
    user: object
    company: Company
    capabilities: Capabilities
    member: Optional[TeamMember] = None

    @property
    def is_owner(self):
        return self.member is None

    def can(self, capability: str) -> bool:
        return bool(getattr(self.capabilities, capability))


def resolve_company_actor(user) -> Optional[CompanyActor]:
    if not user or not user.is_authenticated:
        return None
    company = Company.objects.filter(owner=user).first()
    if company is not None:
        return CompanyActor(user=user, company=company, capabilities=Capabilities.all(True))

    member = (
        TeamMember.objects.select_related('company', 'company__owner')
        .filter(user=user, status='ACCEPTED')
        .order_by('-accepted_at')
        .first()
    )
    if member is not None:
        return CompanyActor(user=user, company=member.company, capabilities=member.capabilities, member=member)
    return None


def company_actor_or_error(user, capability: Optional[str] = None):
    """Return ``(actor, None)`` or ``(None, error_response)``."""
    actor = resolve_company_actor(user)
    if actor is None:
        return None, Response(
            {'error': {'code': 'forbidden', 'message': 'Company account required.'}},
            status=status.HTTP_403_FORBIDDEN,
        )
    if capability and not actor.can(capability):
        return None, Response(
            {'error': {'code': 'forbidden', 'message': 'You do not have permission to perform this action.'}},
            status=status.HTTP_403_FORBIDDEN,
        )
    return actor, None


class IsJobSeeker(permissions.BasePermission):
    message = 'Job seeker account required.'

    def has_permission(self, request, view):
        account = getattr(request.user, 'account', None)
        return bool(request.user and request.user.is_authenticated and account and account.user_type == UserAccount.USER)
