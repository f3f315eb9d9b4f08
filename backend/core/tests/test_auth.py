from datetime import timedelta

import jwt
import pytest
from django.conf import settings
from django.core import mail
from django.urls import reverse
from django.utils import timezone

from core.models import Company, JobSeekerProfile, UserAccount
from core.tests.fixtures import PASSWORD, JobSeekerFactory
from core.tokens import (
    TokenError,
    decode_token,
    generate_access_token,
    generate_password_reset_token,
    generate_refresh_token,
)

SEEKER_PAYLOAD = {
    'email': 'New.Seeker@Example.com',
    'password': 'hunter22',
    'userType': 'USER',
    'firstName': 'Nia',
    'lastName': 'Okafor',
    'phone': '555-0101',
    'city': 'Austin',
}

COMPANY_PAYLOAD = {
    'email': 'hiring@acme.test',
    'password': 'hunter22',
    'userType': 'COMPANY',
    'companyName': 'Acme',
    'industry': 'Software',
    'companySize': '11-50',
    'location': 'Remote',
}


@pytest.mark.django_db
class TestRegistration:
    def test_register_job_seeker_sets_cookies(self, api_client):
        response = api_client.post(reverse('core:register'), SEEKER_PAYLOAD, format='json')

        assert response.status_code == 201
        user = response.json()['user']
        assert user['email'] == 'new.seeker@example.com'
        assert user['userType'] == 'USER'
        assert user['jobSeeker']['firstName'] == 'Nia'
        assert 'access_token' in response.cookies
        assert 'refresh_token' in response.cookies
        assert response.cookies['access_token']['httponly']
        assert JobSeekerProfile.objects.filter(user_id=user['id'], city='Austin').exists()

    def test_register_company(self, api_client):
        response = api_client.post(reverse('core:register'), COMPANY_PAYLOAD, format='json')

        assert response.status_code == 201
        user = response.json()['user']
        assert user['userType'] == 'COMPANY'
        assert user['company']['companyName'] == 'Acme'
        company = Company.objects.get(owner_id=user['id'])
        assert company.contact_email == 'hiring@acme.test'
        assert UserAccount.objects.get(user_id=user['id']).is_company

    def test_duplicate_email_conflicts(self, api_client):
        api_client.post(reverse('core:register'), SEEKER_PAYLOAD, format='json')
        response = api_client.post(
            reverse('core:register'), {**SEEKER_PAYLOAD, 'email': 'NEW.SEEKER@example.com'}, format='json',
        )
        assert response.status_code == 409
        assert response.json()['error']['code'] == 'duplicate_email'

    @pytest.mark.parametrize('payload,field', [
        ({**SEEKER_PAYLOAD, 'city': ''}, 'city'),
        ({**COMPANY_PAYLOAD, 'companyName': ''}, 'companyName'),
        ({**SEEKER_PAYLOAD, 'password': '123'}, 'password'),
        ({**SEEKER_PAYLOAD, 'email': 'not-an-email'}, 'email'),
    ])
    def test_register_validation(self, api_client, payload, field):
        response = api_client.post(reverse('core:register'), payload, format='json')
        assert response.status_code == 400
        error = response.json()['error']
        assert error['code'] == 'validation_error'
        assert field in error['details']


@pytest.mark.django_db
class TestLogin:
    def test_login_and_use_bearer_token(self, api_client):
        seeker = JobSeekerFactory().user
        response = api_client.post(reverse('core:login'), {'email': seeker.email, 'password': PASSWORD}, format='json')

        assert response.status_code == 200
        body = response.json()
        assert body['user']['id'] == seeker.pk

        api_client.cookies.clear()
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {body['accessToken']}")
        me = api_client.get(reverse('core:me'))
        assert me.status_code == 200
        assert me.json()['user']['email'] == seeker.email

    def test_cookie_session_is_enough(self, api_client):
        seeker = JobSeekerFactory().user
        api_client.post(reverse('core:login'), {'email': seeker.email, 'password': PASSWORD}, format='json')
        assert api_client.get(reverse('core:me')).status_code == 200

    def test_wrong_password(self, api_client):
        seeker = JobSeekerFactory().user
        response = api_client.post(reverse('core:login'), {'email': seeker.email, 'password': 'nope'}, format='json')
        assert response.status_code == 401
        assert response.json()['error']['code'] == 'invalid_credentials'

    def test_missing_fields(self, api_client):
        response = api_client.post(reverse('core:login'), {'email': 'a@b.c'}, format='json')
        assert response.status_code == 400

    def test_refresh_token_cannot_authenticate_requests(self, api_client):
        seeker = JobSeekerFactory().user
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {generate_refresh_token(seeker)}')
        response = api_client.get(reverse('core:me'))
        assert response.status_code == 401

    def test_expired_access_token(self, api_client):
        seeker = JobSeekerFactory().user
        past = timezone.now() - timedelta(days=8)
        token = jwt.encode(
            {'userId': seeker.pk, 'type': 'access', 'iat': past, 'exp': past + timedelta(days=7)},
            settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM,
        )
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get(reverse('core:me'))
        assert response.status_code == 401
        assert response.json()['error']['code'] == 'token_expired'

    def test_refresh_issues_new_pair(self, api_client):
        seeker = JobSeekerFactory().user
        api_client.cookies['refresh_token'] = generate_refresh_token(seeker)
        response = api_client.post(reverse('core:refresh'))
        assert response.status_code == 200
        assert decode_token(response.json()['accessToken'])['userId'] == seeker.pk

    def test_refresh_rejects_access_token(self, api_client):
        seeker = JobSeekerFactory().user
        response = api_client.post(
            reverse('core:refresh'), {'refreshToken': generate_access_token(seeker)}, format='json',
        )
        assert response.status_code == 401

    def test_logout_clears_cookies(self, api_client):
        response = api_client.post(reverse('core:logout'))
        assert response.status_code == 200
        assert response.cookies['access_token'].value == ''

    def test_access_token_claims(self):
        seeker = JobSeekerFactory().user
        payload = decode_token(generate_access_token(seeker))
        assert payload['userType'] == 'USER'
        assert payload['companyId'] is None
        with pytest.raises(TokenError):
            decode_token(generate_access_token(seeker), expected_type='refresh')


@pytest.mark.django_db
class TestPasswordReset:
    def test_forgot_password_emails_known_user(self, api_client, django_capture_on_commit_callbacks):
        seeker = JobSeekerFactory().user
        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.post(reverse('core:forgot-password'), {'email': seeker.email}, format='json')

        assert response.status_code == 200
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [seeker.email]
        assert 'http://frontend.test/reset-password?token=' in mail.outbox[0].body

    def test_forgot_password_unknown_email_same_answer(self, api_client, django_capture_on_commit_callbacks):
        seeker = JobSeekerFactory().user
        known = api_client.post(reverse('core:forgot-password'), {'email': seeker.email}, format='json')
        with django_capture_on_commit_callbacks(execute=True):
            unknown = api_client.post(reverse('core:forgot-password'), {'email': 'ghost@x.test'}, format='json')

        assert unknown.status_code == 200
        assert unknown.json() == known.json()
        assert mail.outbox == []

    def test_reset_password(self, api_client):
        seeker = JobSeekerFactory().user
        token = generate_password_reset_token(seeker)
        response = api_client.post(reverse('core:reset-password'), {
            'token': token, 'password': 'brandnew1', 'confirmPassword': 'brandnew1',
        }, format='json')

        assert response.status_code == 200
        seeker.refresh_from_db()
        assert seeker.check_password('brandnew1')

    def test_reset_password_mismatch(self, api_client):
        seeker = JobSeekerFactory().user
        response = api_client.post(reverse('core:reset-password'), {
            'token': generate_password_reset_token(seeker), 'password': 'brandnew1', 'confirmPassword': 'other123',
        }, format='json')
        assert response.status_code == 400

    def test_reset_token_bound_to_email(self, api_client):
        seeker = JobSeekerFactory().user
        token = generate_password_reset_token(seeker)
        seeker.email = 'moved@x.test'
        seeker.save()
        response = api_client.post(reverse('core:reset-password'), {
            'token': token, 'password': 'brandnew1', 'confirmPassword': 'brandnew1',
        }, format='json')
        assert response.status_code == 400
        assert response.json()['error']['code'] == 'invalid_token'

    def test_access_token_is_not_a_reset_token(self, api_client):
        seeker = JobSeekerFactory().user
        response = api_client.post(reverse('core:reset-password'), {
            'token': generate_access_token(seeker), 'password': 'brandnew1', 'confirmPassword': 'brandnew1',
        }, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestUpdateAccount:
    def test_wrong_current_password(self, seeker_client):
        response = seeker_client.post(reverse('core:update-account'), {
            'action': 'change-password', 'currentPassword': 'wrong', 'newPassword': 'newpass1',
        }, format='json')
        assert response.status_code == 403

    def test_change_email_to_taken_address(self, seeker, seeker_client):
        other = JobSeekerFactory().user
        response = seeker_client.post(reverse('core:update-account'), {
            'action': 'change-email', 'currentPassword': PASSWORD, 'newEmail': other.email,
        }, format='json')
        assert response.status_code == 409

    def test_change_email(self, seeker, seeker_client):
        response = seeker_client.post(reverse('core:update-account'), {
            'action': 'change-email', 'currentPassword': PASSWORD, 'newEmail': 'Fresh@Mail.test',
        }, format='json')
        assert response.status_code == 200
        seeker.refresh_from_db()
        assert seeker.email == 'fresh@mail.test'
        assert UserAccount.objects.get(user=seeker).email == 'fresh@mail.test'

    def test_change_password(self, seeker, seeker_client):
        response = seeker_client.post(reverse('core:update-account'), {
            'action': 'change-password', 'currentPassword': PASSWORD, 'newPassword': 'newpass1',
        }, format='json')
        assert response.status_code == 200
        seeker.refresh_from_db()
        assert seeker.check_password('newpass1')

    def test_short_new_password(self, seeker_client):
        response = seeker_client.post(reverse('core:update-account'), {
            'action': 'change-password', 'currentPassword': PASSWORD, 'newPassword': '123',
        }, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestCompanyProfile:
    def test_owner_reads_and_updates(self, company, company_client):
        assert company_client.get(reverse('core:company-profile')).json()['company']['companyName'] == company.name
        response = company_client.put(reverse('core:company-profile'), {'description': 'We build things'}, format='json')
        assert response.status_code == 200
        company.refresh_from_db()
        assert company.description == 'We build things'

    def test_seeker_is_forbidden(self, seeker_client):
        assert seeker_client.get(reverse('core:company-profile')).status_code == 403

    def test_dashboard_stats(self, company_client):
        body = company_client.get(reverse('core:dashboard-stats')).json()
        assert body == {'activeJobs': 0, 'totalApplications': 0, 'interviewsScheduled': 0, 'hiredThisMonth': 0}
