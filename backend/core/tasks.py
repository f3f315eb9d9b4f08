"""Background tasks for emails and real-time delivery.

Each task wraps a ``_..._sync`` helper so the work can also be called
directly. Tasks are dispatched from ``transaction.on_commit`` hooks; they log
failures instead of raising because callers never wait on them.
"""
import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from core.models import TeamMember
from core.realtime import RedisPushNotifier

logger = logging.getLogger(__name__)
User = get_user_model()


def _send_templated_email(template, subject, recipient, context):
    context = {'brand': 'JobKit', **context}
    plain = render_to_string(f'emails/{template}.txt', context)
    html = render_to_string(f'emails/{template}.html', context)
    msg = EmailMultiAlternatives(subject, plain, settings.DEFAULT_FROM_EMAIL, [recipient])
    msg.attach_alternative(html, 'text/html')
    msg.send()


def _send_team_invitation_email_sync(member_id):
    from core.team import invitation_link

    member = TeamMember.objects.select_related('company').get(pk=member_id)
    company_name = member.company.name
    _send_templated_email(
        'team_invitation',
        f"You've been invited to join {company_name} on JobKit",
        member.email,
        {
            'name': member.name,
            'company_name': company_name,
            'role': member.get_role_display(),
            'accept_url': invitation_link(member),
            'expires_in_days': settings.TEAM_INVITATION_TTL_DAYS,
        },
    )
    logger.info('Sent team invitation email to %s for company %s', member.email, member.company_id)


@shared_task(name='core.tasks.send_team_invitation_email')
def send_team_invitation_email(member_id):
    try:
        _send_team_invitation_email_sync(member_id)
    except TeamMember.DoesNotExist:
        logger.warning('Team member %s vanished before the invitation email was sent', member_id)
    except Exception:
        logger.exception('Failed to send team invitation email for member %s', member_id)


def _send_password_reset_email_sync(user_id, reset_url):
    user = User.objects.get(pk=user_id)
    _send_templated_email(
        'password_reset',
        'Reset your JobKit password',
        user.email,
        {
            'reset_url': reset_url,
            'expires_in_minutes': settings.PASSWORD_RESET_TTL_MINUTES,
        },
    )


@shared_task(name='core.tasks.send_password_reset_email')
def send_password_reset_email(user_id, reset_url):
    try:
        _send_password_reset_email_sync(user_id, reset_url)
    except Exception:
        logger.exception('Failed to send password reset email to user %s', user_id)


def _publish_realtime_event_sync(topic, event, payload):
    RedisPushNotifier.from_url(settings.REALTIME_REDIS_URL).publish(topic, event, payload)


@shared_task(name='core.tasks.publish_realtime_event')
def publish_realtime_event(topic, event, payload):
    if not settings.REALTIME_REDIS_URL:
        return
    try:
        _publish_realtime_event_sync(topic, event, payload)
    except Exception:
        logger.exception('Failed to publish %s on %s', event, topic)


def _delete_media_sync(public_ids):
    from core.storage_utils import delete_media

    results = {}
    for public_id in public_ids:
        if public_id:
            results[public_id] = delete_media(public_id)
    return results


@shared_task(name='core.tasks.delete_hosted_media')
def delete_hosted_media(public_ids):
    """Remove uploads left behind by deleted accounts."""
    try:
        return _delete_media_sync(public_ids)
    except Exception:
        logger.exception('Failed to delete hosted media %s', public_ids)
        return {}
