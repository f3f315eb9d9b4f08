"""
Signed session and password-reset tokens (PyJWT, HS256).
"""
import logging
from datetime import timedelta

import jwt
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

ACCESS = 'access'
REFRESH = 'refresh'
PASSWORD_RESET = 'password-reset'


class TokenError(Exception):
    """Raised when a token is missing, malformed, expired or of the wrong kind."""

    def __init__(self, message, code='invalid_token'):
        super().__init__(message)
        self.message = message
        self.code = code


def _identity_claims(user):
    account = getattr(user, 'account', None)
    company = getattr(user, 'company', None) if account and account.is_company else None
    return {
        'userId': user.pk,
        'email': user.email,
        'userType': account.user_type if account else 'USER',
        'companyId': company.pk if company else None,
    }


def _encode(payload, lifetime, secret=None):
    now = timezone.now()
    payload = {**payload, 'iat': now, 'exp': now + lifetime}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def generate_access_token(user):
    return _encode(
        {**_identity_claims(user), 'type': ACCESS},
        timedelta(days=settings.JWT_ACCESS_TTL_DAYS),
    )


def generate_refresh_token(user):
    return _encode(
        {'userId': user.pk, 'type': REFRESH},
        timedelta(days=settings.JWT_REFRESH_TTL_DAYS),
    )


def generate_token_pair(user):
    return {
        'accessToken': generate_access_token(user),
        'refreshToken': generate_refresh_token(user),
    }


def decode_token(token, expected_type=ACCESS):
    """Verify ``token`` and return its payload.

    Refresh tokens are rejected where an access token is expected and vice
    versa.
    """
    if not token:
        raise TokenError('Authentication token is missing', code='not_authenticated')
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError('Token has expired', code='token_expired') from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError('Invalid token') from exc

    if payload.get('type') != expected_type:
        raise TokenError('Invalid token type')
    return payload


def generate_password_reset_token(user):
    lifetime = timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES)
    return _encode(
        {'userId': user.pk, 'email': user.email.lower(), 'purpose': PASSWORD_RESET},
        lifetime,
        secret=settings.RESET_TOKEN_SECRET,
    )


def decode_password_reset_token(token):
    if not token:
        raise TokenError('Reset token is required', code='validation_error')
    try:
        payload = jwt.decode(token, settings.RESET_TOKEN_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError('Reset link has expired. Please request a new one.', code='token_expired') from exc
    except jwt.InvalidTokenError as exc:
        logger.info('Rejected password reset token: %s', exc)
        raise TokenError('Invalid or expired reset link') from exc

    if payload.get('purpose') != PASSWORD_RESET:
        raise TokenError('Invalid or expired reset link')
    return payload
