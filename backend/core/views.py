"""
Identity, account and company-profile endpoints.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.authentication import ACCESS_COOKIE, REFRESH_COOKIE
from core.exceptions import error_response, validation_error_response
from core.models import (
    Company,
    Interview,
    Job,
    JobApplication,
    JobSeekerProfile,
    MessageThread,
    Notification,
    Resume,
    SavedJob,
    UserAccount,
)
from core.permissions import company_actor_or_error
from core.serializers import CompanySerializer, RegisterSerializer, ResetPasswordSerializer, UserSerializer
from core.tokens import (
    REFRESH,
    TokenError,
    decode_password_reset_token,
    decode_token,
    generate_password_reset_token,
    generate_token_pair,
)

logger = logging.getLogger(__name__)
User = get_user_model()


def _set_auth_cookies(response, tokens):
    common = {
        'httponly': True,
        'secure': settings.AUTH_COOKIE_SECURE,
        'samesite': settings.AUTH_COOKIE_SAMESITE,
        'path': '/',
    }
    response.set_cookie(
        ACCESS_COOKIE, tokens['accessToken'],
        max_age=int(timedelta(days=settings.JWT_ACCESS_TTL_DAYS).total_seconds()), **common,
    )
    response.set_cookie(
        REFRESH_COOKIE, tokens['refreshToken'],
        max_age=int(timedelta(days=settings.JWT_REFRESH_TTL_DAYS).total_seconds()), **common,
    )
    return response


def _clear_auth_cookies(response):
    response.delete_cookie(ACCESS_COOKIE, path='/')
    response.delete_cookie(REFRESH_COOKIE, path='/')
    return response


def _find_user_by_email(email):
    return (
        User.objects.select_related('account')
        .filter(Q(account__email=email.lower()) | Q(email__iexact=email))
        .first()
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return Response({'status': 'ok'})


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    Register a job seeker (userType USER) or a company (userType COMPANY).

    The auth user, the account row and the profile are created together;
    session cookies are set on success.
    """
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    data = serializer.validated_data
    email = data['email']
    if _find_user_by_email(email):
        return error_response(
            'duplicate_email',
            'An account with this email already exists.',
            status.HTTP_409_CONFLICT,
        )

    is_company = data['userType'] == UserAccount.COMPANY
    with transaction.atomic():
        user = User.objects.create_user(
            username=email,
            email=email,
            password=data['password'],
            first_name='' if is_company else data['firstName'].strip(),
            last_name='' if is_company else data['lastName'].strip(),
        )
        UserAccount.objects.create(user=user, email=email, user_type=data['userType'])
        if is_company:
            Company.objects.create(
                owner=user,
                name=data['companyName'].strip(),
                industry=data['industry'].strip(),
                company_size=data['companySize'].strip(),
                location=data['location'].strip(),
                contact_email=email,
            )
        else:
            JobSeekerProfile.objects.create(
                user=user,
                first_name=data['firstName'].strip(),
                last_name=data['lastName'].strip(),
                phone=data['phone'].strip(),
                city=data['city'].strip(),
            )

    user = User.objects.select_related('account').get(pk=user.pk)
    tokens = generate_token_pair(user)
    logger.info('Registered %s account for %s', data['userType'], email)
    response = Response(
        {'message': 'Registration successful', 'user': UserSerializer(user).data},
        status=status.HTTP_201_CREATED,
    )
    return _set_auth_cookies(response, tokens)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    email = (request.data.get('email') or '').strip()
    password = request.data.get('password') or ''
    if not email or not password:
        return error_response('validation_error', 'Email and password are required')

    user = _find_user_by_email(email)
    if user is None or not user.is_active or not user.check_password(password):
        return error_response('invalid_credentials', 'Invalid email or password', status.HTTP_401_UNAUTHORIZED)

    tokens = generate_token_pair(user)
    response = Response({'message': 'Login successful', 'user': UserSerializer(user).data, **tokens})
    return _set_auth_cookies(response, tokens)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    return _clear_auth_cookies(Response({'message': 'Logged out successfully'}))


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh(request):
    raw = request.COOKIES.get(REFRESH_COOKIE) or request.data.get('refreshToken')
    try:
        payload = decode_token(raw, expected_type=REFRESH)
    except TokenError as exc:
        response = error_response(exc.code, exc.message, status.HTTP_401_UNAUTHORIZED)
        return _clear_auth_cookies(response)

    user = User.objects.select_related('account').filter(pk=payload.get('userId'), is_active=True).first()
    if user is None:
        return _clear_auth_cookies(error_response('user_not_found', 'User not found', status.HTTP_401_UNAUTHORIZED))

    tokens = generate_token_pair(user)
    return _set_auth_cookies(Response({'user': UserSerializer(user).data, **tokens}), tokens)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    return Response({'user': UserSerializer(request.user).data})


@api_view(['POST'])
@permission_classes([AllowAny])
def forgot_password(request):
    """Always answer the same way so the endpoint cannot be used to enumerate accounts."""
    email = (request.data.get('email') or '').strip()
    if not email:
        return error_response('validation_error', 'Email is required')

    body = {'message': 'If an account exists with this email, a password reset link has been sent.'}
    user = _find_user_by_email(email)
    if user is not None and user.is_active:
        token = generate_password_reset_token(user)
        reset_url = f"{settings.FRONTEND_BASE_URL}/reset-password?token={token}"

        from core.tasks import send_password_reset_email

        def _dispatch():
            try:
                send_password_reset_email.delay(user.pk, reset_url)
            except Exception:
                logger.exception('Could not queue password reset email for user %s', user.pk)

        transaction.on_commit(_dispatch)
        if settings.DEBUG:
            body.update({'resetToken': token, 'resetUrl': reset_url})
    return Response(body)


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password(request):
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    try:
        payload = decode_password_reset_token(serializer.validated_data['token'])
    except TokenError as exc:
        return error_response(exc.code, exc.message)

    user = User.objects.filter(pk=payload.get('userId')).first()
    if user is None or (user.email or '').lower() != payload.get('email'):
        return error_response('invalid_token', 'Invalid or expired reset link')

    user.set_password(serializer.validated_data['password'])
    user.save(update_fields=['password'])
    logger.info('Password reset completed for user %s', user.pk)
    return Response({'message': 'Password has been reset successfully'})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_account(request):
    """Change email or password after confirming the current password."""
    payload = request.data or {}
    action = payload.get('action')
    current_password = payload.get('currentPassword')
    if not action or not current_password:
        return error_response('validation_error', 'Action and current password are required')

    user = request.user
    if not user.check_password(current_password):
        return error_response('invalid_password', 'Current password is incorrect', status.HTTP_403_FORBIDDEN)

    if action == 'change-email':
        new_email = (payload.get('newEmail') or '').strip().lower()
        if not new_email:
            return error_response('validation_error', 'New email is required')
        existing = _find_user_by_email(new_email)
        if existing and existing.pk != user.pk:
            return error_response('duplicate_email', 'Email already in use', status.HTTP_409_CONFLICT)
        with transaction.atomic():
            user.email = new_email
            user.username = new_email
            user.save(update_fields=['email', 'username'])
            UserAccount.objects.filter(user=user).update(email=new_email, updated_at=timezone.now())
        return Response({'ok': True, 'message': 'Email updated successfully'})

    if action == 'change-password':
        new_password = payload.get('newPassword') or ''
        if not new_password:
            return error_response('validation_error', 'New password is required')
        if len(new_password) < 6:
            return error_response('validation_error', 'Password must be at least 6 characters')
        user.set_password(new_password)
        user.save(update_fields=['password'])
        return Response({'ok': True, 'message': 'Password updated successfully'})

    return error_response('validation_error', 'Invalid action')


def _delete_user_and_data(user):
    """Remove a user's rows in one transaction; hosted media is cleaned up after commit."""
    media_ids = []
    with transaction.atomic():
        account = UserAccount.objects.select_for_update().filter(user=user).first()
        if account is not None and account.avatar_public_id:
            media_ids.append(account.avatar_public_id)
        company = Company.objects.select_for_update().filter(owner=user).first()
        if company is not None:
            if company.logo_public_id:
                media_ids.append(company.logo_public_id)
            JobApplication.objects.filter(job__company=company).delete()
            Job.objects.filter(company=company).delete()
            company.delete()
        else:
            JobApplication.objects.filter(applicant=user).delete()
            Resume.objects.filter(user=user).delete()
            SavedJob.objects.filter(user=user).delete()
        MessageThread.objects.filter(Q(company=user) | Q(applicant=user)).delete()
        Notification.objects.filter(user=user).delete()
        user.delete()

    if media_ids:
        from core.tasks import delete_hosted_media

        def _dispatch():
            try:
                delete_hosted_media.delay(media_ids)
            except Exception:
                logger.exception('Could not queue media cleanup for %s', media_ids)

        transaction.on_commit(_dispatch)


@api_view(['DELETE', 'POST'])
@permission_classes([IsAuthenticated])
def delete_account(request):
    current_password = (request.data or {}).get('currentPassword')
    if not current_password:
        return error_response('validation_error', 'Current password is required')
    user = request.user
    if not user.check_password(current_password):
        return error_response('invalid_password', 'Current password is incorrect', status.HTTP_403_FORBIDDEN)

    user_id = user.pk
    _delete_user_and_data(user)
    logger.info('Deleted account %s and associated data', user_id)
    return _clear_auth_cookies(Response({'message': 'Account deleted successfully'}))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def company_profile(request):
    capability = 'can_edit_company' if request.method == 'PUT' else None
    actor, error = company_actor_or_error(request.user, capability)
    if error:
        return error

    if request.method == 'GET':
        return Response({'company': CompanySerializer(actor.company).data})

    serializer = CompanySerializer(actor.company, data=request.data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    company = serializer.save()
    return Response({'message': 'Company settings updated successfully', 'company': CompanySerializer(company).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    actor, error = company_actor_or_error(request.user)
    if error:
        return error
    company = actor.company
    now = timezone.now()
    month_start = timezone.localtime(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    return Response({
        'activeJobs': Job.objects.filter(company=company, is_active=True).count(),
        'totalApplications': JobApplication.objects.filter(job__company=company).count(),
        'interviewsScheduled': Interview.objects.filter(
            job__company=company,
            status__in=['SCHEDULED', 'CONFIRMED', 'RESCHEDULED'],
            scheduled_at__gte=now,
        ).count(),
        'hiredThisMonth': JobApplication.objects.filter(
            job__company=company,
            status='ACCEPTED',
            updated_at__gte=month_start,
        ).count(),
    })
