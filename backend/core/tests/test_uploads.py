import io

import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from PIL import Image
from rest_framework.test import APIClient

from core.models import UserAccount
from core.roles import Role
from core.tests.fixtures import TeamMemberFactory, UserFactory


def _png(name='avatar.png', size=(32, 32)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(200, 30, 30)).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class FakeCloudinary:
    def __init__(self):
        self.uploads = []
        self.destroyed = []

    def upload(self, file_obj, **options):
        self.uploads.append(options)
        public_id = f"{options['folder']}/{options['public_id']}"
        return {'secure_url': f'https://cdn.test/{public_id}', 'public_id': public_id}

    def destroy(self, public_id, **options):
        self.destroyed.append(public_id)
        return {'result': 'ok'}


@pytest.fixture
def cloud(settings, monkeypatch):
    settings.CLOUDINARY_CLOUD_NAME = 'demo'
    settings.CLOUDINARY_API_KEY = 'key'
    settings.CLOUDINARY_API_SECRET = 'secret'
    fake = FakeCloudinary()
    monkeypatch.setattr(cloudinary.uploader, 'upload', fake.upload)
    monkeypatch.setattr(cloudinary.uploader, 'destroy', fake.destroy)
    return fake


@pytest.mark.django_db
class TestMessageFiles:
    def test_upload_files(self, cloud, seeker, seeker_client):
        files = [
            SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain'),
            _png('shot.png'),
        ]
        response = seeker_client.post(reverse('core:upload-message-files'), {'files': files}, format='multipart')

        assert response.status_code == 200
        uploaded = response.json()['files']
        assert [f['name'] for f in uploaded] == ['notes.txt', 'shot.png']
        assert uploaded[0]['url'].startswith('https://cdn.test/job-kit/messages/')
        assert all(options['folder'] == 'job-kit/messages' for options in cloud.uploads)
        assert cloud.uploads[0]['public_id'].startswith(f'{seeker.pk}_')

    def test_rejects_disallowed_type(self, cloud, seeker_client):
        bad = SimpleUploadedFile('run.exe', b'MZ', content_type='application/x-msdownload')
        response = seeker_client.post(reverse('core:upload-message-files'), {'files': [bad]}, format='multipart')
        assert response.status_code == 400
        assert cloud.uploads == []

    def test_too_many_files(self, cloud, seeker_client):
        files = [SimpleUploadedFile(f'{i}.txt', b'x', content_type='text/plain') for i in range(11)]
        response = seeker_client.post(reverse('core:upload-message-files'), {'files': files}, format='multipart')
        assert response.status_code == 400

    def test_storage_not_configured(self, seeker_client):
        files = [SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')]
        response = seeker_client.post(reverse('core:upload-message-files'), {'files': files}, format='multipart')
        assert response.status_code == 503

    def test_upstream_failure(self, cloud, seeker_client, monkeypatch):
        def broken(file_obj, **options):
            raise CloudinaryError('boom')

        monkeypatch.setattr(cloudinary.uploader, 'upload', broken)
        files = [SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')]
        response = seeker_client.post(reverse('core:upload-message-files'), {'files': files}, format='multipart')
        assert response.status_code == 502
        assert response.json()['error']['code'] == 'upload_failed'

    def test_delete_files(self, cloud, seeker_client):
        response = seeker_client.post(
            reverse('core:delete-message-files'), {'public_ids': ['a', 'b']}, format='json',
        )
        assert response.status_code == 200
        assert response.json()['results'] == [
            {'public_id': 'a', 'success': True},
            {'public_id': 'b', 'success': True},
        ]
        assert cloud.destroyed == ['a', 'b']

    def test_delete_requires_list(self, cloud, seeker_client):
        response = seeker_client.post(reverse('core:delete-message-files'), {'public_ids': 'a'}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestAvatarAndLogo:
    def test_avatar_replaces_previous_after_commit(
        self, cloud, seeker, seeker_client, django_capture_on_commit_callbacks,
    ):
        UserAccount.objects.filter(user=seeker).update(avatar_public_id='job-kit/avatars/old')

        with django_capture_on_commit_callbacks(execute=True):
            response = seeker_client.post(reverse('core:upload-avatar'), {'file': _png()}, format='multipart')

        assert response.status_code == 200
        account = UserAccount.objects.get(user=seeker)
        assert account.avatar_url == response.json()['avatarUrl']
        assert account.avatar_public_id.startswith('job-kit/avatars/')
        assert cloud.destroyed == ['job-kit/avatars/old']

    def test_avatar_rejects_non_image(self, cloud, seeker_client):
        fake = SimpleUploadedFile('avatar.png', b'not really a png', content_type='image/png')
        response = seeker_client.post(reverse('core:upload-avatar'), {'file': fake}, format='multipart')
        assert response.status_code == 400
        assert cloud.uploads == []

    def test_logo_upload(self, cloud, company, company_client):
        response = company_client.post(reverse('core:upload-logo'), {'file': _png('logo.png')}, format='multipart')
        assert response.status_code == 200
        company.refresh_from_db()
        assert company.logo_url == response.json()['logoUrl']

    def test_logo_requires_edit_company(self, cloud, company):
        user = UserFactory()
        TeamMemberFactory(company=company, user=user, email=user.email, role=Role.HR)
        client = APIClient()
        client.force_authenticate(user=user)
        response = client.post(reverse('core:upload-logo'), {'file': _png('logo.png')}, format='multipart')
        assert response.status_code == 403
