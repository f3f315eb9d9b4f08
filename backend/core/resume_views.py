"""
Resume builder endpoints: CRUD for the seeker, read access for companies
the seeker applied to, and a printable PDF.
"""
import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import error_response, validation_error_response
from core.models import JobApplication, Resume
from core.permissions import resolve_company_actor
from core.resume_export import ResumeExportError, export_resume_pdf, resume_filename
from core.serializers import ResumeSerializer

logger = logging.getLogger(__name__)


def _latest_resume(user_id):
    return Resume.objects.filter(user_id=user_id).order_by('-updated_at', '-id').first()


@api_view(['GET', 'PUT', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def resume(request):
    """
    GET returns the caller's most recent resume (``null`` when none).
    PUT updates it in place or creates one, POST always creates a new one.
    DELETE removes the latest resume, or the one named by ``?id=``.
    """
    user = request.user

    if request.method == 'GET':
        current = _latest_resume(user.pk)
        return Response({'resume': ResumeSerializer(current).data if current else None})

    if request.method == 'DELETE':
        resume_id = request.query_params.get('id')
        target = Resume.objects.filter(user=user, pk=resume_id).first() if resume_id else _latest_resume(user.pk)
        if target is None:
            return error_response('not_found', 'Resume not found', status.HTTP_404_NOT_FOUND)
        target.delete()
        return Response({'message': 'Resume deleted successfully'})

    existing = _latest_resume(user.pk) if request.method == 'PUT' else None
    serializer = ResumeSerializer(existing, data=request.data, partial=existing is not None)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    saved = serializer.save(user=user)
    created = existing is None
    return Response(
        {
            'message': 'Resume created successfully' if created else 'Resume updated successfully',
            'resume': ResumeSerializer(saved).data,
        },
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def resume_for_user(request, user_id):
    if request.user.pk == user_id:
        current = _latest_resume(user_id)
    else:
        actor = resolve_company_actor(request.user)
        applied = actor is not None and JobApplication.objects.filter(
            applicant_id=user_id, job__company=actor.company,
        ).exists()
        if not applied:
            return error_response(
                'forbidden', 'You can only view resumes of applicants to your jobs', status.HTTP_403_FORBIDDEN,
            )
        current = _latest_resume(user_id)
    if current is None:
        return error_response('not_found', 'Resume not found', status.HTTP_404_NOT_FOUND)
    return Response({'resume': ResumeSerializer(current).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def resume_print(request):
    current = _latest_resume(request.user.pk)
    if current is None:
        return error_response('not_found', 'Resume not found', status.HTTP_404_NOT_FOUND)
    try:
        pdf = export_resume_pdf(current)
    except ResumeExportError as exc:
        return error_response('export_failed', str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = HttpResponse(pdf, content_type='application/pdf')
    disposition = 'attachment' if request.query_params.get('download') in ('1', 'true') else 'inline'
    response['Content-Disposition'] = f'{disposition}; filename="{resume_filename(current)}"'
    return response
