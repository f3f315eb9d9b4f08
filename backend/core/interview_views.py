"""
Interview scheduling between a company and a candidate.
"""
import logging

from dateutil import parser as date_parser
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import error_response, validation_error_response
from core.models import Interview, JobApplication
from core.notifications import build_notification_service
from core.permissions import company_actor_or_error, resolve_company_actor
from core.serializers import InterviewCreateSerializer, InterviewSerializer

logger = logging.getLogger(__name__)

CLOSED_STATUSES = ('CANCELLED', 'COMPLETED')
APPLICATION_OUTCOMES = {'ACCEPTED', 'REJECTED', 'SHORTLISTED'}


def _notify(callback, *args):
    try:
        callback(*args)
    except Exception:
        logger.exception('Interview notification %s failed', getattr(callback, '__name__', callback))


def _interview_for(user, interview_id):
    """Return ``(interview, side, error)``; side is 'candidate' or 'company'."""
    interview = (
        Interview.objects.select_related('job', 'job__company', 'application', 'candidate')
        .filter(pk=interview_id)
        .first()
    )
    if interview is None:
        return None, None, error_response('not_found', 'Interview not found', status.HTTP_404_NOT_FOUND)
    if interview.candidate_id == user.pk:
        return interview, 'candidate', None
    actor = resolve_company_actor(user)
    if actor is not None and actor.company.pk == interview.job.company_id:
        return interview, 'company', None
    return None, None, error_response(
        'forbidden', 'You do not have access to this interview', status.HTTP_403_FORBIDDEN,
    )


def _parse_datetime(value):
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(str(value))
    except (TypeError, ValueError):
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def interviews(request):
    if request.method == 'GET':
        return _list_interviews(request)

    actor, error = company_actor_or_error(request.user, 'can_review_apps')
    if error:
        return error
    serializer = InterviewCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    data = serializer.validated_data

    application = (
        JobApplication.objects.select_related('job', 'job__company')
        .filter(pk=data['applicationId'], job__company=actor.company)
        .first()
    )
    if application is None:
        return error_response('not_found', 'Application not found', status.HTTP_404_NOT_FOUND)
    if data['scheduledAt'] <= timezone.now():
        return error_response('validation_error', 'Interview must be scheduled in the future',
                              details={'scheduledAt': 'Must be in the future.'})

    with transaction.atomic():
        interview = Interview.objects.create(
            application=application,
            job=application.job,
            candidate_id=application.applicant_id,
            company_user_id=actor.company.owner_id,
            title=data['title'],
            description=data['description'],
            interview_type=data['interviewType'],
            scheduled_at=data['scheduledAt'],
            duration_minutes=data['duration'],
            meeting_link=data['meetingLink'],
            meeting_password=data['meetingPassword'],
            location=data['location'],
            company_notes=data['companyNotes'],
        )
        application.status = 'INTERVIEWING'
        application.save(update_fields=['status', 'updated_at'])

    _notify(build_notification_service().notify_interview_scheduled, interview)
    logger.info('Interview %s scheduled for application %s', interview.pk, application.pk)
    return Response(
        {'message': 'Interview scheduled successfully', 'interview': InterviewSerializer(interview).data},
        status=status.HTTP_201_CREATED,
    )


def _list_interviews(request):
    actor = resolve_company_actor(request.user)
    if actor is not None:
        qs = Interview.objects.filter(job__company=actor.company)
    else:
        qs = Interview.objects.filter(candidate=request.user)

    params = request.query_params
    if params.get('status'):
        qs = qs.filter(status=params['status'].upper())
    if params.get('upcoming') in ('1', 'true'):
        qs = qs.filter(scheduled_at__gte=timezone.now()).exclude(status__in=CLOSED_STATUSES)
    qs = qs.select_related('job', 'job__company', 'candidate').order_by('scheduled_at')
    return Response({'interviews': InterviewSerializer(qs, many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def confirm_interview(request, interview_id):
    interview, side, error = _interview_for(request.user, interview_id)
    if error:
        return error
    if side != 'candidate':
        return error_response('forbidden', 'Only the candidate can confirm an interview', status.HTTP_403_FORBIDDEN)
    if interview.status != 'SCHEDULED':
        return error_response('invalid_status', f'Cannot confirm an interview that is {interview.status.lower()}')

    interview.status = 'CONFIRMED'
    note = (request.data or {}).get('notes')
    if note:
        interview.append_note('candidate_notes', note)
    interview.save(update_fields=['status', 'candidate_notes', 'updated_at'])
    _notify(build_notification_service().notify_interview_confirmed, interview)
    return Response({'message': 'Interview confirmed', 'interview': InterviewSerializer(interview).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cancel_interview(request, interview_id):
    interview, side, error = _interview_for(request.user, interview_id)
    if error:
        return error
    if interview.status in CLOSED_STATUSES:
        return error_response('invalid_status', f'Interview is already {interview.status.lower()}')

    interview.status = 'CANCELLED'
    reason = (request.data or {}).get('reason')
    notes_field = 'candidate_notes' if side == 'candidate' else 'company_notes'
    if reason:
        interview.append_note(notes_field, f'Cancelled: {reason}')
    interview.save(update_fields=['status', notes_field, 'updated_at'])

    recipient = interview.company_user_id if side == 'candidate' else interview.candidate_id
    _notify(build_notification_service().notify_interview_cancelled, interview, recipient)
    return Response({'message': 'Interview cancelled', 'interview': InterviewSerializer(interview).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reschedule_interview(request, interview_id):
    interview, side, error = _interview_for(request.user, interview_id)
    if error:
        return error
    if interview.status in CLOSED_STATUSES:
        return error_response('invalid_status', f'Cannot reschedule an interview that is {interview.status.lower()}')

    payload = request.data or {}
    scheduled_at = _parse_datetime(payload.get('scheduledAt'))
    if scheduled_at is None:
        return error_response('validation_error', 'A valid scheduledAt is required',
                              details={'scheduledAt': 'This field is required.'})

    interview.scheduled_at = scheduled_at
    interview.status = 'RESCHEDULED'
    notes_field = 'candidate_notes' if side == 'candidate' else 'company_notes'
    if payload.get('notes'):
        interview.append_note(notes_field, payload['notes'])
    interview.save(update_fields=['scheduled_at', 'status', notes_field, 'updated_at'])

    recipient = interview.company_user_id if side == 'candidate' else interview.candidate_id
    _notify(build_notification_service().notify_interview_rescheduled, interview, recipient)
    return Response({'message': 'Interview rescheduled', 'interview': InterviewSerializer(interview).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def interview_feedback(request, interview_id):
    actor, error = company_actor_or_error(request.user, 'can_review_apps')
    if error:
        return error
    interview = (
        Interview.objects.select_related('job', 'application')
        .filter(Q(pk=interview_id) & Q(job__company=actor.company))
        .first()
    )
    if interview is None:
        return error_response('not_found', 'Interview not found', status.HTTP_404_NOT_FOUND)

    payload = request.data or {}
    rating = payload.get('rating')
    if rating not in (None, ''):
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            rating = 0
        if not 1 <= rating <= 5:
            return error_response('validation_error', 'Rating must be between 1 and 5',
                                  details={'rating': 'Must be between 1 and 5.'})
    else:
        rating = None

    application_status = str(payload.get('applicationStatus') or '').upper()
    if application_status and application_status not in APPLICATION_OUTCOMES:
        return error_response('validation_error', 'Invalid application status',
                              details={'applicationStatus': 'Invalid choice.'})

    with transaction.atomic():
        interview.feedback = payload.get('feedback') or ''
        interview.rating = rating
        interview.status = 'COMPLETED'
        interview.save(update_fields=['feedback', 'rating', 'status', 'updated_at'])
        application = interview.application
        if application_status and application_status != application.status:
            application.status = application_status
            application.save(update_fields=['status', 'updated_at'])
        else:
            application_status = ''

    if application_status:
        _notify(build_notification_service().notify_application_status_change, application)
    return Response({'message': 'Feedback recorded', 'interview': InterviewSerializer(interview).data})
