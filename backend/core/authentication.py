"""
Session token authentication for Django REST Framework.
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import authentication
from rest_framework import exceptions

from core.tokens import ACCESS, TokenError, decode_token

logger = logging.getLogger(__name__)
User = get_user_model()

ACCESS_COOKIE = 'access_token'
REFRESH_COOKIE = 'refresh_token'


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Signed session token authentication.

    The token is read from the "Authorization: Bearer <token>" header or, when
    absent, from the HTTP-only ``access_token`` cookie. Caller-supplied
    identity headers are never consulted.
    """

    keyword = 'Bearer'

    def _get_raw_token(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')
        if auth_header:
            auth_parts = auth_header.split()
            if len(auth_parts) == 2 and auth_parts[0].lower() == self.keyword.lower():
                return auth_parts[1]
            return None
        return request.COOKIES.get(ACCESS_COOKIE)

    def authenticate(self, request):
        token = self._get_raw_token(request)
        if not token:
            return None

        try:
            payload = decode_token(token, expected_type=ACCESS)
        except TokenError as exc:
            raise exceptions.AuthenticationFailed(exc.message, code=exc.code)

        try:
            user = User.objects.select_related('account').get(pk=payload.get('userId'))
        except User.DoesNotExist:
            logger.warning('Token references missing user id=%s', payload.get('userId'))
            raise exceptions.AuthenticationFailed('User not found', code='user_not_found')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('User account is disabled', code='user_inactive')

        return (user, payload)

    def authenticate_header(self, request):
        return self.keyword
