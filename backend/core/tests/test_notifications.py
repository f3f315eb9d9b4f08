from io import StringIO

import pytest
from django.core.management import call_command
from django.urls import reverse

from core.exceptions import NotFound, ValidationFailed
from core.models import Notification
from core.notifications import NotificationService, build_notification_service
from core.realtime import PushNotifier, RecordingPushNotifier
from core.tests.fixtures import (
    ApplicationFactory,
    CompanyFactory,
    JobSeekerFactory,
    NotificationFactory,
    UserFactory,
)


class ExplodingPushNotifier(PushNotifier):
    def publish(self, topic, event, payload):
        raise RuntimeError('channel down')


@pytest.mark.django_db
class TestNotificationService:
    def test_create_pushes_after_commit(self, django_capture_on_commit_callbacks):
        user = UserFactory()
        recorder = RecordingPushNotifier()
        service = NotificationService(pusher=recorder)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            notification = service.create(user.pk, 'ACCOUNT_UPDATE', 'Profile', 'Your profile was updated')
        assert recorder.events == []

        for callback in callbacks:
            callback()
        events = recorder.events_for(f'user-{user.pk}')
        assert [event for event, _ in events] == ['new-notification', 'notification-count-update']
        assert events[0][1]['id'] == notification.pk
        assert events[1][1] == {'unreadCount': 1}

    def test_push_failure_never_fails_create(self, django_capture_on_commit_callbacks):
        user = UserFactory()
        service = NotificationService(pusher=ExplodingPushNotifier())
        with django_capture_on_commit_callbacks(execute=True):
            notification = service.create(user.pk, 'ACCOUNT_UPDATE', 'Title', 'Body')
        assert Notification.objects.filter(pk=notification.pk).exists()

    @pytest.mark.parametrize('missing', ['user_id', 'notification_type', 'title', 'message'])
    def test_create_requires_fields(self, missing):
        user = UserFactory()
        args = {'user_id': user.pk, 'notification_type': 'ACCOUNT_UPDATE', 'title': 'T', 'message': 'M'}
        args[missing] = None
        with pytest.raises(ValidationFailed):
            NotificationService(pusher=RecordingPushNotifier()).create(**args)

    def test_create_rejects_unknown_type(self):
        user = UserFactory()
        with pytest.raises(ValidationFailed):
            NotificationService(pusher=RecordingPushNotifier()).create(user.pk, 'PARTY', 'T', 'M')

    def test_create_for_unknown_user(self):
        with pytest.raises(NotFound):
            NotificationService(pusher=RecordingPushNotifier()).create(999999, 'ACCOUNT_UPDATE', 'T', 'M')

    def test_create_rejects_malformed_user_id(self):
        with pytest.raises(ValidationFailed):
            NotificationService(pusher=RecordingPushNotifier()).create('abc', 'ACCOUNT_UPDATE', 'T', 'M')
        assert Notification.objects.count() == 0

    def test_mark_all_read_then_list(self, django_capture_on_commit_callbacks):
        user = UserFactory()
        NotificationFactory.create_batch(3, user=user)
        recorder = RecordingPushNotifier()
        service = NotificationService(pusher=recorder)

        with django_capture_on_commit_callbacks(execute=True):
            updated = service.mark_all_read(user.pk)
        assert updated == 3

        result = service.list(user.pk)
        assert result['unreadCount'] == 0
        assert all(item['isRead'] for item in result['notifications'])
        assert all(item['readAt'] for item in result['notifications'])
        events = [event for event, _ in recorder.events_for(f'user-{user.pk}')]
        assert events == ['all-notifications-read', 'notification-count-update']

    def test_list_pagination_and_unread_filter(self):
        user = UserFactory()
        NotificationFactory.create_batch(3, user=user, is_read=True)
        NotificationFactory.create_batch(22, user=user)
        service = NotificationService(pusher=RecordingPushNotifier())

        first_page = service.list(user.pk)
        assert len(first_page['notifications']) == 20
        assert first_page['pagination'] == {'page': 1, 'limit': 20, 'total': 25, 'totalPages': 2}
        assert first_page['unreadCount'] == 22

        unread = service.list(user.pk, page=2, unread_only=True)
        assert len(unread['notifications']) == 2
        assert unread['pagination']['total'] == 22
        assert unread['unreadCount'] == 22

    def test_clear(self):
        user = UserFactory()
        other = NotificationFactory()
        NotificationFactory.create_batch(2, user=user)
        assert NotificationService(pusher=RecordingPushNotifier()).clear(user.pk) == 2
        assert Notification.objects.filter(pk=other.pk).exists()

    def test_status_change_helper_only_for_reviewed_outcomes(self):
        application = ApplicationFactory(status='INTERVIEWING')
        service = NotificationService(pusher=RecordingPushNotifier())
        assert service.notify_application_status_change(application) is None

        application.status = 'SHORTLISTED'
        notification = service.notify_application_status_change(application)
        assert notification.notification_type == 'APPLICATION_SHORTLISTED'
        assert notification.user_id == application.applicant_id

    def test_announce_fans_out(self):
        users = UserFactory.create_batch(3)
        service = build_notification_service()
        assert service.announce('Maintenance', 'Down at noon', user_ids=[u.pk for u in users]) == 3
        assert Notification.objects.filter(notification_type='SYSTEM_ANNOUNCEMENT').count() == 3


@pytest.mark.django_db
class TestNotificationEndpoints:
    def test_list_and_count(self, seeker, seeker_client):
        NotificationFactory.create_batch(2, user=seeker)
        NotificationFactory(user=seeker, is_read=True)

        body = seeker_client.get(reverse('core:notifications'), {'unreadOnly': 'true'}).json()
        assert len(body['notifications']) == 2
        assert body['unreadCount'] == 2
        assert seeker_client.get(reverse('core:notification-count')).json() == {'unreadCount': 2}

    def test_create_endpoint(self, seeker, seeker_client):
        response = seeker_client.post(reverse('core:notifications'), {
            'userId': seeker.pk,
            'type': 'NEW_JOB_MATCH',
            'title': 'New match',
            'message': 'A job matches your profile',
            'actionUrl': '/jobs/1',
        }, format='json')
        assert response.status_code == 201
        assert response.json()['notification']['type'] == 'NEW_JOB_MATCH'

    def test_create_endpoint_validation(self, seeker_client):
        response = seeker_client.post(reverse('core:notifications'), {'type': 'NEW_JOB_MATCH'}, format='json')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'validation_error'

    def test_create_endpoint_malformed_user_id(self, seeker_client):
        response = seeker_client.post(reverse('core:notifications'), {
            'userId': 'abc', 'type': 'NEW_JOB_MATCH', 'title': 'New match', 'message': 'A job matches',
        }, format='json')
        assert response.status_code == 400
        assert response.json()['error']['details'] == {'userId': 'A valid integer is required.'}

    def test_mark_read_and_delete_own_only(self, seeker, seeker_client):
        mine = NotificationFactory(user=seeker)
        theirs = NotificationFactory()

        response = seeker_client.patch(reverse('core:notification-detail', kwargs={'notification_id': mine.pk}))
        assert response.status_code == 200
        assert response.json()['notification']['isRead'] is True

        response = seeker_client.delete(reverse('core:notification-detail', kwargs={'notification_id': theirs.pk}))
        assert response.status_code == 404
        assert Notification.objects.filter(pk=theirs.pk).exists()

    def test_read_all_endpoint(self, seeker, seeker_client):
        NotificationFactory.create_batch(2, user=seeker)
        response = seeker_client.post(reverse('core:notifications-read-all'))
        assert response.status_code == 200
        assert response.json()['unreadCount'] == 0
        assert not Notification.objects.filter(user=seeker, is_read=False).exists()

    def test_clear_endpoint(self, seeker, seeker_client):
        NotificationFactory.create_batch(2, user=seeker)
        response = seeker_client.delete(reverse('core:notifications'))
        assert response.json()['deleted'] == 2

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('core:notifications'))
        assert response.status_code == 401


@pytest.mark.django_db
class TestAnnouncementCommand:
    def test_announces_to_every_active_user(self):
        seeker = JobSeekerFactory().user
        owner = CompanyFactory().owner
        UserFactory(is_active=False)

        out = StringIO()
        call_command('send_announcement', 'Maintenance', 'Down at noon', stdout=out)

        assert 'Sent announcement to 2 users' in out.getvalue()
        assert set(
            Notification.objects.filter(notification_type='SYSTEM_ANNOUNCEMENT').values_list('user_id', flat=True)
        ) == {seeker.pk, owner.pk}

    def test_filters_by_user_type_and_email(self):
        seeker = JobSeekerFactory().user
        JobSeekerFactory()
        CompanyFactory()

        call_command('send_announcement', 'New', 'Resume builder', '--user-type', 'USER',
                     '--email', seeker.email.upper(), stdout=StringIO())

        assert list(Notification.objects.values_list('user_id', flat=True)) == [seeker.pk]

    def test_dry_run_sends_nothing(self):
        JobSeekerFactory()
        out = StringIO()
        call_command('send_announcement', 'Hi', 'There', '--dry-run', stdout=out)
        assert 'DRY RUN: Would notify 1 users' in out.getvalue()
        assert Notification.objects.count() == 0
