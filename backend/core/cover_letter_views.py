import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.cover_letter_ai import CoverLetterAIError, export_cover_letter_docx, generate_cover_letter
from core.exceptions import error_response

logger = logging.getLogger(__name__)

DOCX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def generate(request):
    """Generate a tailored cover letter for ``position`` at ``company``."""
    payload = request.data or {}
    company = (payload.get('company') or '').strip()
    position = (payload.get('position') or '').strip()
    resume_data = payload.get('resumeData')
    if not company or not position or not isinstance(resume_data, dict):
        return error_response('validation_error', 'Missing fields: company, position and resumeData are required')

    api_key = getattr(settings, 'GEMINI_API_KEY', '')
    if not api_key:
        return error_response(
            'service_unavailable', 'AI generation is not configured', status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    try:
        letter = generate_cover_letter(company, position, resume_data, api_key=api_key)
    except CoverLetterAIError as exc:
        logger.warning('Cover letter generation failed for user %s: %s', request.user.pk, exc)
        return error_response('ai_generation_failed', str(exc), status.HTTP_502_BAD_GATEWAY)

    return Response({'letter': letter})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def export_cover_letter(request):
    payload = request.data or {}
    letter = (payload.get('letter') or '').strip()
    if not letter:
        return error_response('validation_error', 'letter is required')

    company = (payload.get('company') or '').strip()
    content = export_cover_letter_docx(
        letter,
        candidate_name=(payload.get('candidateName') or '').strip(),
        company=company,
        position=(payload.get('position') or '').strip(),
    )
    slug = '_'.join(company.split()) or 'Cover'
    response = HttpResponse(content, content_type=DOCX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{slug}_Cover_Letter.docx"'
    return response
