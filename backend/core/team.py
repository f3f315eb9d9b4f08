"""
Company team membership: invitations, role changes, capability overrides and
removal.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import Conflict, NotFound, ServiceError, ValidationFailed
from core.models import TeamMember
from core.roles import ROLE_PERMISSIONS, Role, parse_role

logger = logging.getLogger(__name__)


class LastAdminError(ServiceError):
    code = 'last_admin'


class InvitationExpired(ServiceError):
    status_code = 410
    code = 'invitation_expired'


def _role_or_error(value):
    try:
        return parse_role(value)
    except ValueError:
        raise ValidationFailed(
            'Invalid role. Must be one of: ' + ', '.join(Role.values),
            details={'role': 'Invalid choice.'},
        )


def invitation_link(member):
    return f"{settings.FRONTEND_BASE_URL}/dashboard/company/team/accept/{member.pk}"


def list_members(company):
    return list(TeamMember.objects.filter(company=company).order_by('-invited_at', '-created_at'))


def get_member(company, member_id):
    member = TeamMember.objects.filter(company=company, pk=member_id).first()
    if member is None:
        raise NotFound('Team member not found')
    return member


def invite_member(company, email, role, name=''):
    """Create a PENDING member with the role's default capabilities.

    The invitation email goes out after commit; a delivery failure never
    undoes the invite.
    """
    email = (email or '').strip().lower()
    if not email or not role:
        raise ValidationFailed('Email and role are required')
    role = _role_or_error(role)

    if TeamMember.objects.filter(company=company, email=email).exists():
        raise Conflict('This user is already invited', code='already_invited')

    member = TeamMember(
        company=company,
        email=email,
        name=(name or '').strip() or email.split('@')[0],
        role=role,
        status='PENDING',
        invited_at=timezone.now(),
    )
    member.apply_capabilities(ROLE_PERMISSIONS[role])
    try:
        with transaction.atomic():
            member.save()
    except IntegrityError:
        raise Conflict('This user is already invited', code='already_invited')

    _queue_invitation_email(member)
    logger.info('Invited %s to company %s as %s', email, company.pk, role)
    return member


def _queue_invitation_email(member):
    from core.tasks import send_team_invitation_email

    def _dispatch():
        try:
            send_team_invitation_email.delay(str(member.pk))
        except Exception:
            logger.exception('Could not queue invitation email for team member %s', member.pk)

    transaction.on_commit(_dispatch)


def update_member(company, member_id, payload):
    """Apply a role change and/or capability overrides.

    A supplied role resets all six flags to that role's defaults first, then
    any capability keys in ``payload`` are applied on top.
    """
    member = get_member(company, member_id)
    payload = payload or {}

    capabilities = member.capabilities
    if payload.get('role') is not None:
        role = _role_or_error(payload['role'])
        member.role = role
        capabilities = ROLE_PERMISSIONS[role]

    try:
        capabilities = capabilities.with_overrides(payload)
    except ValueError as exc:
        raise ValidationFailed(str(exc), details={'capabilities': str(exc)})
    member.apply_capabilities(capabilities)

    if 'name' in payload:
        member.name = (payload.get('name') or '').strip()
    if payload.get('status'):
        status_value = str(payload['status']).upper()
        if status_value not in dict(TeamMember.STATUS_CHOICES):
            raise ValidationFailed('Invalid status', details={'status': 'Invalid choice.'})
        member.status = status_value

    member.save()
    return member


def remove_member(company, member_id):
    """Delete a member, refusing to remove the company's last ADMIN.

    The company's ADMIN rows are locked for the count-and-delete so two
    concurrent removals cannot both pass the check.
    """
    with transaction.atomic():
        member = TeamMember.objects.select_for_update().filter(company=company, pk=member_id).first()
        if member is None:
            raise NotFound('Team member not found')
        if member.role == Role.ADMIN:
            admin_ids = list(
                TeamMember.objects.select_for_update()
                .filter(company=company, role=Role.ADMIN)
                .values_list('pk', flat=True)
            )
            if len(admin_ids) <= 1:
                raise LastAdminError('Cannot remove the last admin')
        member.delete()
    logger.info('Removed team member %s from company %s', member_id, company.pk)


def accept_invitation(user, member_id):
    with transaction.atomic():
        member = TeamMember.objects.select_for_update().select_related('company').filter(pk=member_id).first()
        if member is None or member.email != (user.email or '').lower():
            raise NotFound('Invitation not found')
        if member.status == 'ACCEPTED':
            return member
        if member.status != 'PENDING':
            raise ValidationFailed(f'Invitation is {member.status.lower()}')
        if member.is_expired():
            member.status = 'EXPIRED'
            member.save(update_fields=['status', 'updated_at'])
        else:
            member.status = 'ACCEPTED'
            member.accepted_at = timezone.now()
            member.user = user
            member.save(update_fields=['status', 'accepted_at', 'user', 'updated_at'])
            return member
    raise InvitationExpired('This invitation has expired')
