import pytest
from django.db import IntegrityError, transaction
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import Forbidden, ValidationFailed
from core.messaging import (
    applicant_intro_text,
    build_messaging_service,
    company_started_text,
    detect_message_type,
    get_or_create_thread,
    preview_text,
)
from core.models import Message, MessageThread, Notification
from core.tests.fixtures import ApplicationFactory, JobSeekerFactory


@pytest.fixture
def application():
    return ApplicationFactory()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.mark.django_db
class TestGetOrCreateThread:
    def test_same_tuple_returns_same_thread(self, application):
        company_user = application.job.company.owner
        first, created = get_or_create_thread(company_user, application.applicant, application.job, 'Hi...')
        second, created_again = get_or_create_thread(company_user, application.applicant, application.job, 'Other')

        assert created is True
        assert created_again is False
        assert first.pk == second.pk
        assert first.last_message == 'Hi...'
        second.refresh_from_db()
        assert second.last_message == 'Hi...'
        assert MessageThread.objects.count() == 1

    def test_seed_message_written_with_thread(self, application):
        company_user = application.job.company.owner
        thread, _ = get_or_create_thread(
            company_user, application.applicant, application.job, 'Hello there', seed_message=True,
        )
        message = Message.objects.get(thread=thread)
        assert message.sender_id == application.applicant_id
        assert message.receiver_id == company_user.pk
        assert message.content == 'Hello there'

    def test_database_rejects_duplicate_tuple(self, application):
        company_user = application.job.company.owner
        MessageThread.objects.create(company=company_user, applicant=application.applicant, job=application.job)
        with pytest.raises(IntegrityError), transaction.atomic():
            MessageThread.objects.create(company=company_user, applicant=application.applicant, job=application.job)

    def test_database_rejects_duplicate_jobless_thread(self, application):
        company_user = application.job.company.owner
        MessageThread.objects.create(company=company_user, applicant=application.applicant, job=None)
        with pytest.raises(IntegrityError), transaction.atomic():
            MessageThread.objects.create(company=company_user, applicant=application.applicant, job=None)


@pytest.mark.django_db
class TestApplicationEntryPoints:
    def test_company_starts_conversation(self, application):
        client = _client_for(application.job.company.owner)
        response = client.post(reverse('core:message-applicant'), {'applicationId': application.pk}, format='json')

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        title = application.job.title
        assert body['message'] == f'Conversation started with {application.full_name} for {title} position'
        thread = MessageThread.objects.get(pk=body['threadId'])
        assert thread.last_message == company_started_text(title)
        assert not thread.messages.exists()

        again = client.post(reverse('core:message-applicant'), {'applicationId': application.pk}, format='json')
        assert again.json()['threadId'] == body['threadId']

    def test_applicant_creates_thread_with_intro_message(self, application):
        client = _client_for(application.applicant)
        response = client.post(reverse('core:messages-create'), {'applicationId': application.pk}, format='json')

        assert response.status_code == 201
        thread = MessageThread.objects.get(pk=response.json()['threadId'])
        intro = applicant_intro_text(application.job.title)
        assert thread.last_message == intro
        assert list(thread.messages.values_list('content', flat=True)) == [intro]

        again = client.post(reverse('core:messages-create'), {'applicationId': application.pk}, format='json')
        assert again.status_code == 200
        assert again.json()['threadId'] == thread.pk
        assert thread.messages.count() == 1

    def test_outsider_is_forbidden(self, application):
        client = _client_for(JobSeekerFactory().user)
        response = client.post(reverse('core:message-applicant'), {'applicationId': application.pk}, format='json')
        assert response.status_code == 403
        assert MessageThread.objects.count() == 0

    def test_unknown_application(self, company_client):
        response = company_client.post(reverse('core:message-applicant'), {'applicationId': 999999}, format='json')
        assert response.status_code == 404

    def test_missing_application_id(self, company_client):
        response = company_client.post(reverse('core:message-applicant'), {}, format='json')
        assert response.status_code == 400

    @pytest.mark.parametrize('url_name', ['core:message-applicant', 'core:messages-create'])
    def test_malformed_application_id(self, company_client, url_name):
        response = company_client.post(reverse(url_name), {'applicationId': 'abc'}, format='json')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'validation_error'
        assert MessageThread.objects.count() == 0


@pytest.mark.django_db
class TestSendingMessages:
    def test_send_by_tuple_then_by_thread(self, application, push, django_capture_on_commit_callbacks):
        company_user = application.job.company.owner
        client = _client_for(company_user)

        with django_capture_on_commit_callbacks(execute=True):
            first = client.post(reverse('core:messages'), {
                'receiverId': application.applicant_id,
                'jobId': application.job_id,
                'content': 'Are you free Tuesday?',
            }, format='json')
        assert first.status_code == 201
        thread_id = first.json()['threadId']

        reply_client = _client_for(application.applicant)
        reply = reply_client.post(
            reverse('core:thread-detail', kwargs={'thread_id': thread_id}), {'content': 'Yes!'}, format='json',
        )
        assert reply.status_code == 201
        assert reply.json()['message']['receiverId'] == company_user.pk

        thread = MessageThread.objects.get(pk=thread_id)
        assert thread.last_message == 'Yes!'
        assert thread.messages.count() == 2

        events = [event for event, _ in push.events_for(f'thread-{thread_id}')]
        assert 'new-message' in events
        assert ('thread-updated' in
                [event for event, _ in push.events_for(f'user-{application.applicant_id}')])

    def test_receiver_gets_truncated_preview_notification(self, application):
        service = build_messaging_service()
        long_text = 'x' * 150
        service.send(application.job.company.owner, receiver=application.applicant, job=application.job,
                     content=long_text)
        notification = Notification.objects.get(user=application.applicant, notification_type='NEW_MESSAGE')
        assert notification.message == 'x' * 100 + '...'

    def test_attachment_only_message_preview(self, application):
        service = build_messaging_service()
        message = service.send(
            application.applicant,
            receiver=application.job.company.owner,
            job=application.job,
            attachments=[{'name': 'cv.pdf', 'url': 'https://cdn/cv.pdf'}, {'name': 'photo.png', 'url': 'https://cdn/p.png'}],
        )
        assert message.message_type == 'MIXED'
        assert message.thread.last_message == '📎 2 attachments'

    @pytest.mark.parametrize('payload', [
        {'threadId': 'abc', 'content': 'Hi'},
        {'receiverId': 'abc', 'content': 'Hi'},
        {'receiverId': -3, 'content': 'Hi'},
    ])
    def test_malformed_ids_are_rejected(self, application, payload):
        client = _client_for(application.applicant)
        response = client.post(reverse('core:messages'), payload, format='json')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'validation_error'
        assert Message.objects.count() == 0

    def test_malformed_job_id_is_rejected(self, application):
        client = _client_for(application.applicant)
        response = client.post(reverse('core:messages'), {
            'receiverId': application.job.company.owner_id, 'jobId': 'abc', 'content': 'Hi',
        }, format='json')
        assert response.status_code == 400
        assert 'jobId' in response.json()['error']['details']

    def test_empty_message_rejected(self, application):
        service = build_messaging_service()
        with pytest.raises(ValidationFailed):
            service.send(application.applicant, receiver=application.job.company.owner, job=application.job)

    def test_job_message_must_involve_company(self, application):
        stranger = JobSeekerFactory().user
        with pytest.raises(Forbidden):
            build_messaging_service().send(
                stranger, receiver=application.applicant, job=application.job, content='hi',
            )

    def test_thread_detail_marks_inbound_read(self, application):
        company_user = application.job.company.owner
        service = build_messaging_service()
        message = service.send(application.applicant, receiver=company_user, job=application.job, content='Hello')

        response = _client_for(company_user).get(reverse('core:thread-detail', kwargs={'thread_id': message.thread_id}))
        assert response.status_code == 200
        body = response.json()
        assert [m['content'] for m in body['messages']] == ['Hello']
        assert body['pagination']['total'] == 1
        message.refresh_from_db()
        assert message.is_read is True

    def test_thread_detail_forbidden_for_outsider(self, application):
        service = build_messaging_service()
        message = service.send(application.applicant, receiver=application.job.company.owner,
                               job=application.job, content='Hello')
        outsider = _client_for(JobSeekerFactory().user)
        response = outsider.get(reverse('core:thread-detail', kwargs={'thread_id': message.thread_id}))
        assert response.status_code == 403

    def test_thread_list_and_stats(self, application):
        company_user = application.job.company.owner
        build_messaging_service().send(application.applicant, receiver=company_user,
                                       job=application.job, content='Hi')
        client = _client_for(company_user)

        threads = client.get(reverse('core:messages')).json()['threads']
        assert len(threads) == 1
        assert threads[0]['unreadCount'] == 1
        assert threads[0]['latestMessage']['content'] == 'Hi'

        stats = client.get(reverse('core:thread-stats')).json()
        assert stats == {'totalThreads': 1, 'unreadCount': 1, 'todayMessages': 1}


@pytest.mark.parametrize('attachments,expected', [
    ([], 'TEXT'),
    ([{'name': 'a.jpg'}], 'IMAGE'),
    ([{'name': 'a.pdf'}, {'name': 'b.docx'}], 'DOCUMENT'),
    ([{'name': 'a.png'}, {'name': 'b.txt'}], 'MIXED'),
    ([{'url': 'https://cdn/file.zip'}], 'MIXED'),
])
def test_detect_message_type(attachments, expected):
    assert detect_message_type(attachments) == expected


def test_preview_text():
    assert preview_text('hello', []) == 'hello'
    assert preview_text('', [{'name': 'a.pdf'}]) == '📎 1 attachment'
