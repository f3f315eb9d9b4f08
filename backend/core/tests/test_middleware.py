import pytest
from django.test import RequestFactory
from django.urls import reverse

from core.middleware import UntrustedIdentityHeaderMiddleware
from core.tests.fixtures import CompanyFactory, JobSeekerFactory
from core.tokens import generate_access_token


def test_identity_headers_are_stripped(core_logs):
    seen = {}

    def view(request):
        seen.update(request.META)
        return 'ok'

    request = RequestFactory().get('/api/auth/me', HTTP_X_USER_ID='1', HTTP_X_COMPANY_ID='2', HTTP_X_TRACE='t')
    assert UntrustedIdentityHeaderMiddleware(view)(request) == 'ok'

    assert 'HTTP_X_USER_ID' not in seen
    assert 'HTTP_X_COMPANY_ID' not in seen
    assert seen['HTTP_X_TRACE'] == 't'
    assert 'Ignoring untrusted identity header HTTP_X_USER_ID' in core_logs.text


@pytest.mark.django_db
def test_spoofed_header_cannot_change_identity(api_client):
    seeker = JobSeekerFactory().user
    company = CompanyFactory()
    api_client.credentials(
        HTTP_AUTHORIZATION=f'Bearer {generate_access_token(seeker)}',
        HTTP_X_USER_ID=str(company.owner_id),
        HTTP_X_COMPANY_ID=str(company.pk),
    )

    assert api_client.get(reverse('core:me')).json()['user']['id'] == seeker.pk
    assert api_client.get(reverse('core:company-profile')).status_code == 403


@pytest.mark.django_db
def test_headers_alone_do_not_authenticate(api_client):
    company = CompanyFactory()
    api_client.credentials(HTTP_X_USER_ID=str(company.owner_id))
    assert api_client.get(reverse('core:me')).status_code == 401
