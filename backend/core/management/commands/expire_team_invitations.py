"""
Management command to expire stale team invitations.

Usage:
    python manage.py expire_team_invitations --days=7

Marks PENDING invitations older than the given number of days as EXPIRED.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.models import TeamMember

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Mark pending team invitations past their lifetime as expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=getattr(settings, 'TEAM_INVITATION_TTL_DAYS', 7),
            help='Invitation lifetime in days (default: TEAM_INVITATION_TTL_DAYS)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be expired without changing anything'
        )

    def handle(self, *args, **options):
        days = options['days']
        cutoff = timezone.now() - timedelta(days=days)
        stale = TeamMember.objects.filter(status='PENDING', invited_at__lt=cutoff).select_related('company')
        count = stale.count()

        if options['dry_run']:
            self.stdout.write(self.style.WARNING(f"DRY RUN: Would expire {count} invitations"))
            for member in stale[:10]:
                self.stdout.write(f"  - {member.email} at {member.company.name} (invited {member.invited_at.date()})")
            if count > 10:
                self.stdout.write(f"  ... and {count - 10} more")
            return

        updated = stale.update(status='EXPIRED', updated_at=timezone.now())
        self.stdout.write(self.style.SUCCESS(f"Expired {updated} team invitations"))
        logger.info('Expired %s team invitations older than %s days', updated, days)
