"""
Management command to broadcast a system announcement to users' notification feeds.

Usage:
    python manage.py send_announcement "Maintenance" "JobKit is down Sunday 02:00-03:00 UTC"
    python manage.py send_announcement "New feature" "Try the resume builder" --user-type USER
    python manage.py send_announcement "Hello" "Welcome" --email a@example.com --email b@example.com
"""
import logging

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from core.models import UserAccount
from core.notifications import build_notification_service

logger = logging.getLogger(__name__)
User = get_user_model()


class Command(BaseCommand):
    help = 'Send a SYSTEM_ANNOUNCEMENT notification to every active user or a chosen subset'

    def add_arguments(self, parser):
        parser.add_argument('title', type=str, help='Notification title')
        parser.add_argument('message', type=str, help='Notification body')
        parser.add_argument(
            '--user-type',
            choices=[UserAccount.USER, UserAccount.COMPANY],
            help='Only notify job seekers (USER) or companies (COMPANY)'
        )
        parser.add_argument(
            '--email',
            action='append',
            default=[],
            help='Only notify this user; may be given more than once'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count recipients without sending anything'
        )

    def handle(self, *args, **options):
        recipients = User.objects.filter(is_active=True)
        if options['user_type']:
            recipients = recipients.filter(account__user_type=options['user_type'])
        if options['email']:
            recipients = recipients.filter(email__in=[e.strip().lower() for e in options['email']])
        user_ids = list(recipients.values_list('pk', flat=True))

        if not user_ids:
            self.stdout.write(self.style.ERROR('No active users match; nothing sent'))
            return

        if options['dry_run']:
            self.stdout.write(self.style.WARNING(f"DRY RUN: Would notify {len(user_ids)} users"))
            return

        sent = build_notification_service().announce(options['title'], options['message'], user_ids=user_ids)
        self.stdout.write(self.style.SUCCESS(f"Sent announcement to {sent} users"))
        logger.info('Sent announcement %r to %s users', options['title'], sent)
