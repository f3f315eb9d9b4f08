"""
AI cover letter generation via Gemini, plus .docx export of the result.
"""
import io
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

import requests
from django.conf import settings
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'


class CoverLetterAIError(Exception):
    """Raised when Gemini cannot produce a cover letter."""


def _lines(items, formatter):
    return '\n'.join(formatter(item) for item in (items or []) if isinstance(item, dict))


def build_cover_letter_prompt(company: str, position: str, resume: Dict[str, Any]) -> str:
    skills = ', '.join(str(s) for s in (resume.get('skills') or []))
    experience = _lines(
        resume.get('experience'),
        lambda e: f"- {e.get('role', '')} at {e.get('company', '')} ({e.get('startDate', '')} - {e.get('endDate', '')}): {e.get('description', '')}",
    )
    projects = _lines(resume.get('projects'), lambda p: f"- {p.get('title', '')}: {p.get('description', '')}")
    education = _lines(resume.get('education'), lambda e: f"- {e.get('degree', '')} at {e.get('school', '')}")

    return f"""
Generate a professional cover letter based on the user's resume below.

====================
USER RESUME DATA
====================
Name: {resume.get('name', '')}
Email: {resume.get('email', '')}
Phone: {resume.get('phone', '')}

Summary:
{resume.get('summary') or 'None'}

Skills:
{skills}

Experience:
{experience}

Projects:
{projects}

Education:
{education}

====================
JOB DETAILS
====================
Company Name: {company}
Position: {position}

====================
INSTRUCTIONS
====================
- Write a clear, professional, and personalized cover letter.
- Highlight the user's strengths and experience relevant to the job.
- Do NOT repeat resume lines directly; rewrite them smartly.
- Max 3 paragraphs + closing.
- Output only the final formatted letter.
"""


def call_gemini_api(prompt: str, api_key: str, *, model: Optional[str] = None, timeout: int = 40) -> str:
    if not api_key:
        raise CoverLetterAIError('Gemini API key is not configured.')
    model_name = model or getattr(settings, 'GEMINI_MODEL', 'gemini-2.0-flash')
    payload = {
        'contents': [
            {
                'role': 'user',
                'parts': [{'text': prompt}],
            }
        ],
        'generationConfig': {
            'temperature': 0.7,
            'topP': 0.9,
            'topK': 40,
            'maxOutputTokens': 2048,
        },
    }
    try:
        response = requests.post(
            GEMINI_ENDPOINT.format(model=model_name),
            params={'key': api_key},
            json=payload,
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.error('Gemini API request failed: %s', exc)
        raise CoverLetterAIError('Unable to reach Gemini API. Please try again.') from exc

    data = response.json()

    block_reason = (data.get('promptFeedback') or {}).get('blockReason')
    if block_reason:
        logger.error('Gemini blocked request. Reason: %s', block_reason)
        raise CoverLetterAIError(f'Content was blocked by Gemini: {block_reason}.')

    candidates = data.get('candidates') or []
    if not candidates:
        logger.error('Gemini returned empty candidates. Full response: %s', data)
        raise CoverLetterAIError('Gemini returned an empty result.')

    first_candidate = candidates[0]
    finish_reason = first_candidate.get('finishReason')
    if finish_reason and finish_reason not in ('STOP', 'MAX_TOKENS'):
        logger.error('Gemini stopped with reason: %s', finish_reason)
        raise CoverLetterAIError(f'Generation stopped: {finish_reason}.')

    parts = first_candidate.get('content', {}).get('parts', [])
    texts = [part.get('text') for part in parts if part.get('text')]
    if not texts:
        raise CoverLetterAIError('Gemini response did not include text output.')
    return texts[0]


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith('```'):
        stripped = re.sub(r'^```\w*', '', stripped, count=1).strip()
        if stripped.endswith('```'):
            stripped = stripped[:-3].strip()
    return stripped


def generate_cover_letter(company: str, position: str, resume: Dict[str, Any], *, api_key: str, model: Optional[str] = None) -> str:
    prompt = build_cover_letter_prompt(company, position, resume)
    letter = _strip_code_fence(call_gemini_api(prompt, api_key, model=model))
    if not letter:
        raise CoverLetterAIError('Gemini returned an empty cover letter.')
    return letter


def export_cover_letter_docx(letter: str, *, candidate_name: str = '', company: str = '', position: str = '') -> bytes:
    """Build a Word document for a generated letter."""
    doc = Document()
    for section in doc.sections:
        section.top_margin = Inches(0.75)
        section.bottom_margin = Inches(0.75)
        section.left_margin = Inches(0.75)
        section.right_margin = Inches(0.75)

    style = doc.styles['Normal']
    style.font.name = 'Calibri'
    style.font.size = Pt(11)

    if candidate_name:
        header = doc.add_paragraph()
        header.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = header.add_run(candidate_name)
        run.bold = True
        run.font.size = Pt(14)

    doc.add_paragraph(date.today().strftime('%B %d, %Y'))
    if company:
        doc.add_paragraph('Hiring Manager')
        doc.add_paragraph(company)
    if position:
        doc.add_paragraph(f'Re: {position}')
    doc.add_paragraph()

    for block in re.split(r'\n\s*\n', letter.strip()):
        if block.strip():
            doc.add_paragraph(block.strip())

    buffer = io.BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer.read()
