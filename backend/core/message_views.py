"""
Conversation endpoints between companies and applicants.
"""
import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import error_response
from core.messaging import build_messaging_service, start_thread_for_application
from core.models import Job
from core.permissions import resolve_company_actor
from core.serializers import MessageSerializer, ThreadSerializer, parse_id

logger = logging.getLogger(__name__)
User = get_user_model()


def _application_id(request):
    application_id = (request.data or {}).get('applicationId')
    if not application_id:
        return None, error_response('validation_error', 'applicationId is required')
    return parse_id(application_id, 'applicationId'), None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def message_applicant(request):
    """Company-initiated conversation about an application."""
    application_id, error = _application_id(request)
    if error:
        return error
    result = start_thread_for_application(request.user, application_id, seed_message=False)
    return Response({
        'success': True,
        'threadId': result.thread.pk,
        'created': result.created,
        'message': result.confirmation,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_thread_from_application(request):
    """Open the thread for an application with the applicant's intro message."""
    application_id, error = _application_id(request)
    if error:
        return error
    result = start_thread_for_application(request.user, application_id, seed_message=True)
    return Response(
        {
            'success': True,
            'threadId': result.thread.pk,
            'created': result.created,
            'message': result.confirmation,
        },
        status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def messages(request):
    service = build_messaging_service()

    if request.method == 'GET':
        threads = service.threads_for(request.user)
        return Response({
            'threads': ThreadSerializer(threads, many=True, context={'request': request}).data,
        })

    payload = request.data or {}
    thread = None
    receiver = None
    job = None
    if payload.get('threadId'):
        thread = service.get_thread(request.user, parse_id(payload['threadId'], 'threadId'))
    else:
        receiver_id = payload.get('receiverId')
        if not receiver_id:
            return error_response('validation_error', 'receiverId or threadId is required')
        receiver = User.objects.filter(pk=parse_id(receiver_id, 'receiverId')).first()
        if receiver is None:
            return error_response('not_found', 'Receiver not found', status.HTTP_404_NOT_FOUND)
        if receiver.pk == request.user.pk:
            return error_response('validation_error', 'You cannot message yourself')
        if payload.get('jobId'):
            job = Job.objects.select_related('company').filter(pk=parse_id(payload['jobId'], 'jobId')).first()
            if job is None:
                return error_response('not_found', 'Job not found', status.HTTP_404_NOT_FOUND)

    message = service.send(
        request.user,
        thread=thread,
        receiver=receiver,
        job=job,
        content=payload.get('content') or '',
        attachments=payload.get('attachments') or [],
    )
    return Response(
        {'message': MessageSerializer(message).data, 'threadId': message.thread_id},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def thread_detail(request, thread_id):
    service = build_messaging_service()

    if request.method == 'GET':
        thread, page = service.read_thread(
            request.user,
            thread_id,
            page=_int_param(request.query_params.get('page'), 1),
            limit=_int_param(request.query_params.get('limit'), 50),
        )
        return Response({
            'thread': ThreadSerializer(thread, context={'request': request}).data,
            **page,
        })

    thread = service.get_thread(request.user, thread_id)
    payload = request.data or {}
    message = service.send(
        request.user,
        thread=thread,
        content=payload.get('content') or '',
        attachments=payload.get('attachments') or [],
    )
    return Response({'message': MessageSerializer(message).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def thread_stats(request):
    actor = resolve_company_actor(request.user)
    company_user = actor.company.owner if actor is not None else None
    return Response(build_messaging_service().thread_stats(request.user, company_user))


def _int_param(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
