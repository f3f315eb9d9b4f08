"""
Application pipeline: seekers apply, companies review.
"""
import logging
import math

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import error_response, validation_error_response
from core.models import Job, JobApplication
from core.notifications import build_notification_service
from core.permissions import IsJobSeeker, company_actor_or_error
from core.serializers import ApplicationCreateSerializer, ApplicationSerializer, display_name, parse_id

logger = logging.getLogger(__name__)

STATUS_VALUES = {value for value, _ in JobApplication.STATUS_CHOICES}


def _notify(callback, *args):
    """Run a notification helper; failures are logged, never surfaced."""
    try:
        callback(*args)
    except Exception:
        logger.exception('Notification %s failed', getattr(callback, '__name__', callback))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsJobSeeker])
def apply_to_job(request, job_id):
    job = Job.objects.select_related('company').filter(pk=job_id).first()
    if job is None:
        return error_response('not_found', 'Job not found', status.HTTP_404_NOT_FOUND)
    if not job.is_active:
        return error_response('job_closed', 'This job is no longer accepting applications')
    if job.is_past_deadline():
        return error_response('deadline_passed', 'The application deadline for this job has passed')

    user = request.user
    payload = request.data.copy()
    payload.setdefault('fullName', display_name(user))
    payload.setdefault('email', user.email)
    profile = getattr(user, 'job_seeker', None)
    if profile is not None:
        payload.setdefault('phone', profile.phone)

    serializer = ApplicationCreateSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    if JobApplication.objects.filter(job=job, applicant=user).exists():
        return error_response('already_applied', 'You have already applied for this job', status.HTTP_409_CONFLICT)
    try:
        with transaction.atomic():
            application = serializer.save(job=job, applicant=user, status='PENDING')
    except IntegrityError:
        return error_response('already_applied', 'You have already applied for this job', status.HTTP_409_CONFLICT)

    _notify(build_notification_service().notify_new_application, application)
    logger.info('User %s applied to job %s', user.pk, job.pk)
    return Response(
        {'message': 'Application submitted successfully', 'application': ApplicationSerializer(application).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsJobSeeker])
def my_applications(request):
    qs = JobApplication.objects.filter(applicant=request.user).select_related('job', 'job__company')
    status_filter = request.query_params.get('status')
    if status_filter:
        qs = qs.filter(status=status_filter.upper())
    return Response({'applications': ApplicationSerializer(qs, many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsJobSeeker])
def withdraw_application(request, application_id):
    application = JobApplication.objects.filter(pk=application_id, applicant=request.user).first()
    if application is None:
        return error_response('not_found', 'Application not found', status.HTTP_404_NOT_FOUND)
    if application.status in ('ACCEPTED', 'REJECTED', 'WITHDRAWN'):
        return error_response('invalid_status', f'Cannot withdraw an application that is {application.status.lower()}')
    application.status = 'WITHDRAWN'
    application.save(update_fields=['status', 'updated_at'])
    return Response({'application': ApplicationSerializer(application).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def company_applications(request):
    actor, error = company_actor_or_error(request.user)
    if error:
        return error

    params = request.query_params
    qs = JobApplication.objects.filter(job__company=actor.company).select_related('job', 'job__company')
    if params.get('status') and params['status'].upper() != 'ALL':
        qs = qs.filter(status=params['status'].upper())
    if params.get('jobId'):
        qs = qs.filter(job_id=parse_id(params['jobId'], 'jobId'))
    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(
            Q(full_name__icontains=search) | Q(email__icontains=search) | Q(job__title__icontains=search)
        )

    try:
        page = max(int(params.get('page', 1)), 1)
        limit = min(max(int(params.get('limit', 10)), 1), 100)
    except (TypeError, ValueError):
        page, limit = 1, 10
    total = qs.count()
    offset = (page - 1) * limit
    items = qs.order_by('-created_at')[offset:offset + limit]
    total_pages = math.ceil(total / limit) if total else 0
    return Response({
        'applications': ApplicationSerializer(items, many=True).data,
        'total': total,
        'totalPages': total_pages,
        'currentPage': page,
        'hasMore': page < total_pages,
    })


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def company_application_detail(request, application_id):
    capability = None if request.method == 'GET' else 'can_review_apps'
    actor, error = company_actor_or_error(request.user, capability)
    if error:
        return error

    application = (
        JobApplication.objects.select_related('job', 'job__company')
        .filter(pk=application_id, job__company=actor.company)
        .first()
    )
    if application is None:
        return error_response('not_found', 'Application not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response({'application': ApplicationSerializer(application).data})

    if request.method == 'DELETE':
        application.delete()
        return Response({'message': 'Application deleted successfully'})

    payload = request.data or {}
    update_fields = []
    status_changed = False
    if 'status' in payload:
        new_status = str(payload.get('status') or '').upper()
        if new_status not in STATUS_VALUES:
            return error_response('validation_error', 'Invalid status', details={'status': 'Invalid choice.'})
        status_changed = new_status != application.status
        application.status = new_status
        update_fields.append('status')
    if 'notes' in payload:
        application.notes = payload.get('notes') or ''
        update_fields.append('notes')
    if not update_fields:
        return error_response('validation_error', 'Nothing to update')

    application.save(update_fields=update_fields + ['updated_at'])
    if status_changed:
        _notify(build_notification_service().notify_application_status_change, application)
    return Response({'message': 'Application updated successfully', 'application': ApplicationSerializer(application).data})
