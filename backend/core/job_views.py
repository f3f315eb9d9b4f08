"""
Job catalog: public listing/search, company job management and saved jobs.
"""
import logging
import math
from decimal import Decimal, InvalidOperation

from django.db.models import Count, Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.exceptions import error_response, validation_error_response
from core.models import Job, SavedJob
from core.permissions import IsJobSeeker, company_actor_or_error
from core.serializers import JobSerializer, SavedJobSerializer, parse_id

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _page_params(request, default_limit=DEFAULT_PAGE_SIZE):
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.query_params.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    return page, min(max(limit, 1), MAX_PAGE_SIZE)


def _decimal_param(value):
    if value in (None, ''):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _skills_query(skills):
    query = Q()
    for skill in skills:
        query |= Q(skills__icontains=skill)
    return query


def _active_jobs():
    return Job.objects.filter(is_active=True).select_related('company')


@api_view(['GET'])
@permission_classes([AllowAny])
def job_list(request):
    params = request.query_params
    qs = _active_jobs()

    search = (params.get('search') or '').strip()
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search) | _skills_query([search]))
    if params.get('workType'):
        qs = qs.filter(work_type=params['workType'])
    if params.get('experienceLevel'):
        qs = qs.filter(experience_level=params['experienceLevel'])
    if params.get('location'):
        qs = qs.filter(location__icontains=params['location'])

    page, limit = _page_params(request)
    total = qs.count()
    jobs = qs.order_by('-created_at')[(page - 1) * limit:page * limit]
    return Response({
        'jobs': JobSerializer(jobs, many=True).data,
        'total': total,
        'page': page,
        'limit': limit,
        'pages': math.ceil(total / limit) if total else 0,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def job_search(request):
    params = request.query_params
    qs = _active_jobs()

    q = (params.get('q') or '').strip()
    location = (params.get('location') or '').strip()
    work_type = params.get('workType') or ''
    experience_level = params.get('experienceLevel') or ''
    salary_min = _decimal_param(params.get('salaryMin'))
    salary_max = _decimal_param(params.get('salaryMax'))
    skills = [s.strip() for s in (params.get('skills') or '').split(',') if s.strip()]

    if q:
        qs = qs.filter(
            Q(title__icontains=q)
            | Q(description__icontains=q)
            | Q(company__name__icontains=q)
            | _skills_query([q])
        )
    if location:
        qs = qs.filter(location__icontains=location)
    if work_type:
        qs = qs.filter(work_type=work_type)
    if experience_level:
        qs = qs.filter(experience_level=experience_level)
    if salary_min is not None:
        qs = qs.filter(Q(salary_max__gte=salary_min) | Q(salary_max__isnull=True))
    if salary_max is not None:
        qs = qs.filter(Q(salary_min__lte=salary_max) | Q(salary_min__isnull=True))
    if skills:
        qs = qs.filter(_skills_query(skills))

    page, limit = _page_params(request)
    total = qs.count()
    jobs = qs.order_by('-created_at')[(page - 1) * limit:page * limit]
    return Response({
        'jobs': JobSerializer(jobs, many=True).data,
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if total else 0,
        'filters': {
            'q': q,
            'location': location,
            'workType': work_type,
            'salaryMin': params.get('salaryMin') or '',
            'salaryMax': params.get('salaryMax') or '',
            'experienceLevel': experience_level,
            'skills': skills,
        },
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def job_detail(request, job_id):
    job = _active_jobs().filter(pk=job_id).first()
    if job is None:
        return error_response('not_found', 'Job not found', status.HTTP_404_NOT_FOUND)
    return Response({'job': JobSerializer(job).data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def company_jobs(request):
    if request.method == 'GET':
        actor, error = company_actor_or_error(request.user)
        if error:
            return error
        jobs = (
            Job.objects.filter(company=actor.company)
            .select_related('company')
            .annotate(application_count=Count('applications'))
            .order_by('-created_at')
        )
        return Response({'jobs': JobSerializer(jobs, many=True).data})

    actor, error = company_actor_or_error(request.user, 'can_create_jobs')
    if error:
        return error
    serializer = JobSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    job = serializer.save(company=actor.company)
    logger.info('Company %s posted job %s', actor.company.pk, job.pk)
    return Response({'message': 'Job posted successfully', 'job': JobSerializer(job).data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def company_job_detail(request, job_id):
    capability = {
        'PATCH': 'can_edit_jobs',
        'PUT': 'can_edit_jobs',
        'DELETE': 'can_delete_jobs',
    }.get(request.method)
    actor, error = company_actor_or_error(request.user, capability)
    if error:
        return error

    job = (
        Job.objects.filter(company=actor.company, pk=job_id)
        .select_related('company')
        .annotate(application_count=Count('applications'))
        .first()
    )
    if job is None:
        return error_response('not_found', 'Job not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response({'job': JobSerializer(job).data})

    if request.method == 'DELETE':
        job.delete()
        logger.info('Company %s deleted job %s', actor.company.pk, job_id)
        return Response({'message': 'Job deleted successfully'})

    serializer = JobSerializer(job, data=request.data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    job = serializer.save()
    return Response({'message': 'Job updated successfully', 'job': JobSerializer(job).data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsJobSeeker])
def saved_jobs(request):
    if request.method == 'GET':
        page, limit = _page_params(request)
        qs = SavedJob.objects.filter(user=request.user).select_related('job', 'job__company')
        total = qs.count()
        items = qs[(page - 1) * limit:page * limit]
        return Response({
            'savedJobs': SavedJobSerializer(items, many=True).data,
            'total': total,
            'page': page,
            'totalPages': math.ceil(total / limit) if total else 0,
        })

    job_id = (request.data or {}).get('jobId')
    if not job_id:
        return error_response('validation_error', 'jobId is required')
    job = _active_jobs().filter(pk=parse_id(job_id, 'jobId')).first()
    if job is None:
        return error_response('not_found', 'Job not found', status.HTTP_404_NOT_FOUND)
    saved, created = SavedJob.objects.get_or_create(user=request.user, job=job)
    if not created:
        return error_response('already_saved', 'Job already saved', status.HTTP_409_CONFLICT)
    return Response({'message': 'Job saved', 'savedJob': SavedJobSerializer(saved).data}, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsJobSeeker])
def saved_job_delete(request, job_id):
    deleted, _ = SavedJob.objects.filter(user=request.user, job_id=job_id).delete()
    if not deleted:
        return error_response('not_found', 'Saved job not found', status.HTTP_404_NOT_FOUND)
    return Response({'message': 'Job removed from saved list'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def saved_job_check(request, job_id):
    return Response({'isSaved': SavedJob.objects.filter(user=request.user, job_id=job_id).exists()})
