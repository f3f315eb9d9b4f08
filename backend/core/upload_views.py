"""
File upload endpoints backed by Cloudinary.
"""
import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core import storage_utils
from core.exceptions import error_response
from core.models import UserAccount
from core.permissions import company_actor_or_error
from core.storage_utils import StorageError

logger = logging.getLogger(__name__)

MAX_FILES_PER_MESSAGE = 10


def _storage_unavailable():
    return error_response(
        'service_unavailable', 'File storage is not configured', status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def _upload_failed(exc):
    return error_response('upload_failed', str(exc), status.HTTP_502_BAD_GATEWAY)


def _cleanup_later(public_id):
    """Drop a replaced upload once the new reference is committed."""
    if not public_id:
        return
    from core.tasks import delete_hosted_media

    def _dispatch():
        try:
            delete_hosted_media.delay([public_id])
        except Exception:
            logger.exception('Could not queue deletion of replaced media %s', public_id)

    transaction.on_commit(_dispatch)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_message_files(request):
    files = request.FILES.getlist('files')
    if not files:
        return error_response('validation_error', 'No files provided')
    if len(files) > MAX_FILES_PER_MESSAGE:
        return error_response('validation_error', f'You can upload at most {MAX_FILES_PER_MESSAGE} files at once')

    for upload in files:
        ok, message = storage_utils.validate_upload(
            upload, storage_utils.ALLOWED_MESSAGE_FILE_TYPES, storage_utils.MAX_MESSAGE_FILE_SIZE,
        )
        if not ok:
            return error_response('validation_error', message)

    if not storage_utils.is_configured():
        return _storage_unavailable()

    uploaded = []
    try:
        for upload in files:
            uploaded.append(storage_utils.upload_file(upload, storage_utils.MESSAGE_FOLDER, request.user.pk))
    except StorageError as exc:
        return _upload_failed(exc)
    logger.info('User %s uploaded %d message file(s)', request.user.pk, len(uploaded))
    return Response({'files': uploaded})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, FormParser])
def delete_message_files(request):
    public_ids = (request.data or {}).get('public_ids')
    if not isinstance(public_ids, list) or not public_ids:
        return error_response('validation_error', 'public_ids must be a non-empty list')
    if not storage_utils.is_configured():
        return _storage_unavailable()

    results = []
    for public_id in public_ids:
        try:
            deleted = storage_utils.delete_media(public_id)
        except StorageError as exc:
            results.append({'public_id': public_id, 'success': False, 'error': str(exc)})
            continue
        results.append({'public_id': public_id, 'success': deleted})
    return Response({'results': results})


def _validated_image(request):
    upload = request.FILES.get('file') or request.FILES.get('image')
    if upload is None:
        return None, error_response('validation_error', 'No file provided')
    ok, message = storage_utils.validate_image_file(upload)
    if not ok:
        return None, error_response('validation_error', message)
    if not storage_utils.is_configured():
        return None, _storage_unavailable()
    return upload, None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_avatar(request):
    upload, error = _validated_image(request)
    if error:
        return error
    try:
        result = storage_utils.upload_image(upload, storage_utils.AVATAR_FOLDER, request.user.pk)
    except StorageError as exc:
        return _upload_failed(exc)

    with transaction.atomic():
        account, _ = UserAccount.objects.select_for_update().get_or_create(
            user=request.user, defaults={'email': request.user.email},
        )
        previous = account.avatar_public_id
        account.avatar_url = result['url']
        account.avatar_public_id = result['public_id'] or ''
        account.save(update_fields=['avatar_url', 'avatar_public_id', 'updated_at'])
        if previous and previous != account.avatar_public_id:
            _cleanup_later(previous)
    return Response({'message': 'Avatar updated successfully', 'avatarUrl': result['url'], 'file': result})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_logo(request):
    actor, error = company_actor_or_error(request.user, 'can_edit_company')
    if error:
        return error
    upload, error = _validated_image(request)
    if error:
        return error
    try:
        result = storage_utils.upload_image(upload, storage_utils.LOGO_FOLDER, actor.company.pk)
    except StorageError as exc:
        return _upload_failed(exc)

    company = actor.company
    with transaction.atomic():
        previous = company.logo_public_id
        company.logo_url = result['url']
        company.logo_public_id = result['public_id'] or ''
        company.save(update_fields=['logo_url', 'logo_public_id', 'updated_at'])
        if previous and previous != company.logo_public_id:
            _cleanup_later(previous)
    return Response({'message': 'Logo updated successfully', 'logoUrl': result['url'], 'file': result})
