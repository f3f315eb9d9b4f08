"""
Per-user notification feed.

``NotificationService`` owns the feed writes and the real-time side effects.
The push channel is passed in, and events are published only after the
surrounding transaction commits so a rolled back write never reaches clients.
"""
import logging
import math
from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFound, ValidationFailed
from core.models import Notification
from core.realtime import PushNotifier, get_push_notifier, publish_after_commit, user_topic
from core.serializers import NotificationSerializer, parse_id

logger = logging.getLogger(__name__)
User = get_user_model()

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

APPLICATION_STATUS_COPY = {
    'REVIEWED': ('APPLICATION_VIEWED', 'Application Reviewed', 'Your application for {title} has been reviewed'),
    'SHORTLISTED': ('APPLICATION_SHORTLISTED', 'Application Shortlisted', 'Congratulations! You have been shortlisted for {title}'),
    'ACCEPTED': ('APPLICATION_ACCEPTED', 'Application Accepted', 'Great news! Your application for {title} has been accepted'),
    'REJECTED': ('APPLICATION_REJECTED', 'Application Update', 'Your application for {title} was not selected this time'),
}


class NotificationService:
    def __init__(self, pusher: Optional[PushNotifier] = None):
        self.pusher = pusher or get_push_notifier()

    # feed operations

    def create(self, user_id, notification_type, title, message, data=None, action_url=None):
        missing = [
            name for name, value in (
                ('userId', user_id),
                ('type', notification_type),
                ('title', title),
                ('message', message),
            ) if value in (None, '')
        ]
        if missing:
            raise ValidationFailed(
                'Missing required fields: userId, type, title, message',
                details={name: 'This field is required.' for name in missing},
            )
        if notification_type not in Notification.TYPES:
            raise ValidationFailed(f'Unknown notification type: {notification_type}', details={'type': 'Invalid choice.'})
        user_id = parse_id(user_id, 'userId')
        if not User.objects.filter(pk=user_id).exists():
            raise NotFound('User not found')

        notification = Notification.objects.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            data=data,
            action_url=action_url or '',
        )
        self._push_created(notification)
        return notification

    def create_bulk(self, user_ids: Iterable, notification_type, title, message, data=None, action_url=None):
        """Fan one notification out to many users (system announcements)."""
        rows = [
            Notification(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                data=data,
                action_url=action_url or '',
            )
            for user_id in set(user_ids)
        ]
        with transaction.atomic():
            Notification.objects.bulk_create(rows)
            for user_id in {row.user_id for row in rows}:
                publish_after_commit(
                    self.pusher, user_topic(user_id), 'notification-count-update',
                    {'unreadCount': self.unread_count(user_id)},
                )
        return len(rows)

    def list(self, user_id, page=1, limit=DEFAULT_PAGE_SIZE, unread_only=False):
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
        qs = Notification.objects.filter(user_id=user_id)
        if unread_only:
            qs = qs.filter(is_read=False)
        total = qs.count()
        offset = (page - 1) * limit
        items = list(qs.order_by('-created_at', '-id')[offset:offset + limit])
        return {
            'notifications': NotificationSerializer(items, many=True).data,
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'totalPages': math.ceil(total / limit) if total else 0,
            },
            'unreadCount': self.unread_count(user_id),
        }

    def unread_count(self, user_id):
        return Notification.objects.filter(user_id=user_id, is_read=False).count()

    def get(self, user_id, notification_id):
        notification = Notification.objects.filter(pk=notification_id, user_id=user_id).first()
        if notification is None:
            raise NotFound('Notification not found')
        return notification

    def mark_read(self, user_id, notification_id):
        notification = self.get(user_id, notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['is_read', 'read_at'])
            publish_after_commit(
                self.pusher, user_topic(user_id), 'notification-count-update',
                {'unreadCount': self.unread_count(user_id)},
            )
        return notification

    def mark_all_read(self, user_id):
        updated = Notification.objects.filter(user_id=user_id, is_read=False).update(
            is_read=True, read_at=timezone.now(),
        )
        topic = user_topic(user_id)
        publish_after_commit(self.pusher, topic, 'all-notifications-read', {'count': updated})
        publish_after_commit(self.pusher, topic, 'notification-count-update', {'unreadCount': 0})
        return updated

    def delete(self, user_id, notification_id):
        notification = self.get(user_id, notification_id)
        notification.delete()
        publish_after_commit(
            self.pusher, user_topic(user_id), 'notification-count-update',
            {'unreadCount': self.unread_count(user_id)},
        )

    def clear(self, user_id):
        deleted, _ = Notification.objects.filter(user_id=user_id).delete()
        publish_after_commit(self.pusher, user_topic(user_id), 'notification-count-update', {'unreadCount': 0})
        return deleted

    def _push_created(self, notification):
        topic = user_topic(notification.user_id)
        publish_after_commit(self.pusher, topic, 'new-notification', NotificationSerializer(notification).data)
        publish_after_commit(
            self.pusher, topic, 'notification-count-update',
            {'unreadCount': self.unread_count(notification.user_id)},
        )

    # typed helpers used by other modules

    def notify_new_application(self, application):
        job = application.job
        return self.create(
            job.company.owner_id,
            'NEW_APPLICATION',
            'New Job Application',
            f'{application.full_name} applied for {job.title}',
            data={'applicationId': application.pk, 'jobId': job.pk},
            action_url=f'/dashboard/company/applications/{application.pk}',
        )

    def notify_application_status_change(self, application):
        copy = APPLICATION_STATUS_COPY.get(application.status)
        if copy is None:
            return None
        notification_type, title, template = copy
        return self.create(
            application.applicant_id,
            notification_type,
            title,
            template.format(title=application.job.title),
            data={'applicationId': application.pk, 'jobId': application.job_id, 'status': application.status},
            action_url='/dashboard/user/applications',
        )

    def notify_interview_scheduled(self, interview):
        when = timezone.localtime(interview.scheduled_at).strftime('%b %d, %Y at %I:%M %p')
        return self.create(
            interview.candidate_id,
            'INTERVIEW_SCHEDULED',
            'Interview Scheduled',
            f'Your interview for {interview.job.title} is scheduled for {when}',
            data={'interviewId': interview.pk, 'jobId': interview.job_id},
            action_url='/dashboard/user/interviews',
        )

    def notify_interview_rescheduled(self, interview, recipient_id):
        when = timezone.localtime(interview.scheduled_at).strftime('%b %d, %Y at %I:%M %p')
        return self.create(
            recipient_id,
            'INTERVIEW_RESCHEDULED',
            'Interview Rescheduled',
            f'The interview for {interview.job.title} has been moved to {when}',
            data={'interviewId': interview.pk, 'jobId': interview.job_id},
        )

    def notify_interview_cancelled(self, interview, recipient_id):
        return self.create(
            recipient_id,
            'INTERVIEW_CANCELLED',
            'Interview Cancelled',
            f'The interview for {interview.job.title} has been cancelled',
            data={'interviewId': interview.pk, 'jobId': interview.job_id},
        )

    def notify_interview_confirmed(self, interview):
        return self.create(
            interview.company_user_id,
            'INTERVIEW_CONFIRMED',
            'Interview Confirmed',
            f'{interview.application.full_name} confirmed the interview for {interview.job.title}',
            data={'interviewId': interview.pk, 'jobId': interview.job_id},
        )

    def notify_new_message(self, message, sender_name):
        preview = message.content or ''
        if len(preview) > 100:
            preview = preview[:100] + '...'
        return self.create(
            message.receiver_id,
            'NEW_MESSAGE',
            f'New message from {sender_name}',
            preview or 'Sent you an attachment',
            data={'threadId': message.thread_id, 'messageId': message.pk, 'senderId': message.sender_id},
            action_url=f'/messages/{message.thread_id}',
        )

    def announce(self, title, message, user_ids=None):
        if user_ids is None:
            user_ids = User.objects.filter(is_active=True).values_list('pk', flat=True)
        return self.create_bulk(user_ids, 'SYSTEM_ANNOUNCEMENT', title, message)


def build_notification_service() -> NotificationService:
    return NotificationService(pusher=get_push_notifier())
