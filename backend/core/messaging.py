"""
Company <-> applicant conversation threads.

A thread is unique per (company user, applicant, job); the database
constraint backs ``get_or_create`` so concurrent first contacts converge on
one row.
"""
import logging
import math
import os
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from core.exceptions import Forbidden, NotFound, ValidationFailed
from core.models import JobApplication, Message, MessageThread
from core.notifications import NotificationService, build_notification_service
from core.realtime import publish_after_commit, thread_topic, user_topic
from core.serializers import MessageSerializer, display_name

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}
DOCUMENT_EXTENSIONS = {'.pdf', '.doc', '.docx', '.txt'}
DEFAULT_THREAD_PAGE_SIZE = 50


@dataclass
class ThreadResult:
    thread: MessageThread
    created: bool
    confirmation: str


def company_started_text(job_title):
    return f'Started conversation about {job_title} position'


def applicant_intro_text(job_title):
    return f"Hi, I applied for the {job_title} position. I'm very interested in this opportunity."


def get_or_create_thread(company_user, applicant, job, seed_text, *, seed_message=False):
    """Find the thread for the tuple or create it with ``seed_text`` as preview.

    With ``seed_message`` a newly created thread also gets one message from
    the applicant to the company carrying the same text. Both rows are
    written in one transaction.
    """
    with transaction.atomic():
        thread, created = MessageThread.objects.get_or_create(
            company=company_user,
            applicant=applicant,
            job=job,
            defaults={
                'last_message': seed_text,
                'last_message_at': timezone.now(),
                'is_read': False,
            },
        )
        if created and seed_message:
            Message.objects.create(
                thread=thread,
                sender=applicant,
                receiver=company_user,
                content=seed_text,
                message_type='TEXT',
            )
    if created:
        logger.info('Created thread %s for company=%s applicant=%s job=%s',
                    thread.pk, company_user.pk, applicant.pk, getattr(job, 'pk', None))
    return thread, created


def start_thread_for_application(user, application_id, *, seed_message=False):
    """Open (or reuse) the thread behind a job application.

    The caller must be the job's company owner or the applicant.
    """
    application = (
        JobApplication.objects.select_related('job', 'job__company', 'job__company__owner', 'applicant')
        .filter(pk=application_id)
        .first()
    )
    if application is None:
        raise NotFound('Application not found')

    job = application.job
    company_user = job.company.owner
    applicant = application.applicant
    if user.pk not in (company_user.pk, applicant.pk):
        raise Forbidden('You do not have permission to message about this application')

    if seed_message:
        seed_text = applicant_intro_text(job.title)
    else:
        seed_text = company_started_text(job.title)
    thread, created = get_or_create_thread(company_user, applicant, job, seed_text, seed_message=seed_message)

    if user.pk == company_user.pk:
        counterpart = application.full_name or display_name(applicant)
        confirmation = f'Conversation started with {counterpart} for {job.title} position'
    else:
        confirmation = f'Conversation started with {job.company.name} for {job.title} position'
    return ThreadResult(thread=thread, created=created, confirmation=confirmation)


def detect_message_type(attachments):
    if not attachments:
        return 'TEXT'
    kinds = set()
    for attachment in attachments:
        name = (attachment.get('name') or attachment.get('url') or '') if isinstance(attachment, dict) else str(attachment)
        ext = os.path.splitext(name.lower())[1]
        if ext in IMAGE_EXTENSIONS:
            kinds.add('IMAGE')
        elif ext in DOCUMENT_EXTENSIONS:
            kinds.add('DOCUMENT')
        else:
            kinds.add('OTHER')
    if kinds == {'IMAGE'}:
        return 'IMAGE'
    if kinds == {'DOCUMENT'}:
        return 'DOCUMENT'
    return 'MIXED'


def preview_text(content, attachments):
    if content:
        return content
    count = len(attachments or [])
    return f"📎 {count} attachment{'s' if count != 1 else ''}"


class MessagingService:
    def __init__(self, notifications: NotificationService):
        self.notifications = notifications
        self.pusher = notifications.pusher

    def threads_for(self, user):
        return (
            MessageThread.objects.filter(Q(company=user) | Q(applicant=user))
            .select_related('company', 'applicant', 'job')
            .annotate(unread_count=Count('messages', filter=Q(messages__receiver=user, messages__is_read=False)))
            .order_by('-updated_at')
        )

    def get_thread(self, user, thread_id):
        thread = MessageThread.objects.select_related('company', 'applicant', 'job').filter(pk=thread_id).first()
        if thread is None:
            raise NotFound('Thread not found')
        if not thread.involves(user):
            raise Forbidden('You do not have access to this conversation')
        return thread

    def read_thread(self, user, thread_id, page=1, limit=DEFAULT_THREAD_PAGE_SIZE):
        """Return one page of messages (oldest first) and mark the caller's inbound ones read."""
        thread = self.get_thread(user, thread_id)
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or DEFAULT_THREAD_PAGE_SIZE), 1), 200)

        with transaction.atomic():
            Message.objects.filter(thread=thread, receiver=user, is_read=False).update(is_read=True)
            if not thread.is_read:
                thread.is_read = True
                thread.save(update_fields=['is_read'])

        qs = thread.messages.select_related('sender', 'sender__account').order_by('created_at', 'id')
        total = qs.count()
        offset = (page - 1) * limit
        return thread, {
            'messages': MessageSerializer(qs[offset:offset + limit], many=True).data,
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'totalPages': math.ceil(total / limit) if total else 0,
            },
        }

    def send(self, sender, *, thread=None, receiver=None, job=None, content='', attachments=None):
        """Append a message to ``thread`` or to the thread for (sender, receiver, job)."""
        content = (content or '').strip()
        attachments = list(attachments or [])
        if not content and not attachments:
            raise ValidationFailed('Message content or attachments are required')

        if thread is None:
            if receiver is None:
                raise ValidationFailed('receiverId is required')
            company_user, applicant = self._sides(sender, receiver, job)
            thread, _ = get_or_create_thread(company_user, applicant, job, preview_text(content, attachments))
        elif not thread.involves(sender):
            raise Forbidden('You do not have access to this conversation')

        receiver_id = thread.other_party_id(sender)
        with transaction.atomic():
            message = Message.objects.create(
                thread=thread,
                sender=sender,
                receiver_id=receiver_id,
                content=content,
                attachments=attachments,
                message_type=detect_message_type(attachments),
            )
            thread.last_message = preview_text(content, attachments)
            thread.last_message_at = message.created_at
            thread.is_read = False
            thread.save(update_fields=['last_message', 'last_message_at', 'is_read', 'updated_at'])

            payload = MessageSerializer(message).data
            publish_after_commit(self.pusher, thread_topic(thread.pk), 'new-message', payload)
            publish_after_commit(self.pusher, user_topic(receiver_id), 'thread-updated', {
                'threadId': thread.pk,
                'lastMessage': thread.last_message,
                'lastMessageAt': thread.last_message_at,
            })

        try:
            self.notifications.notify_new_message(message, display_name(sender))
        except Exception:
            logger.exception('Failed to create new-message notification for message %s', message.pk)
        return message

    def _sides(self, sender, receiver, job):
        """Work out which participant is the company side of a new thread."""
        if job is not None:
            owner_id = job.company.owner_id
            if sender.pk == owner_id:
                return sender, receiver
            if receiver.pk == owner_id:
                return receiver, sender
            raise Forbidden('Messages about a job must involve the company that posted it')
        if getattr(sender, 'company', None) is not None:
            return sender, receiver
        if getattr(receiver, 'company', None) is not None:
            return receiver, sender
        raise ValidationFailed('Conversations must be between a company and a job seeker')

    def thread_stats(self, user, company_user=None):
        """Thread totals for the inbox header.

        ``company_user`` widens the count to a company's threads when the
        caller acts on its behalf.
        """
        participant = Q(applicant=user) | Q(company=user)
        if company_user is not None and company_user.pk != user.pk:
            participant |= Q(company=company_user)
        threads = MessageThread.objects.filter(participant)
        start_of_day = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        today_messages = Message.objects.filter(
            Q(sender=user) | Q(receiver=user),
            created_at__gte=start_of_day,
        ).count()
        return {
            'totalThreads': threads.count(),
            'unreadCount': threads.filter(is_read=False).count(),
            'todayMessages': today_messages,
        }


def build_messaging_service(notifications: Optional[NotificationService] = None) -> MessagingService:
    return MessagingService(notifications or build_notification_service())
