"""
Resume print view: renders a stored Resume to PDF with reportlab.
"""
import io
import logging
from typing import Any, Dict, List

from django.utils.html import escape
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)


class ResumeExportError(Exception):
    """Raised when a resume cannot be rendered."""


# template -> (accent colour, body font)
TEMPLATE_STYLES = {
    'classic': ('#1f2937', 'Times-Roman'),
    'modern': ('#2563eb', 'Helvetica'),
    'minimal': ('#111827', 'Helvetica'),
    'professional': ('#1f4e79', 'Helvetica'),
}


def _styles(template):
    accent, font = TEMPLATE_STYLES.get(template, TEMPLATE_STYLES['classic'])
    bold = f'{font}-Bold' if font == 'Helvetica' else 'Times-Bold'
    base = getSampleStyleSheet()
    return {
        'accent': HexColor(accent),
        'name': ParagraphStyle('ResumeName', parent=base['Title'], fontName=bold, fontSize=20,
                               alignment=TA_CENTER, textColor=HexColor(accent), spaceAfter=4),
        'contact': ParagraphStyle('ResumeContact', parent=base['Normal'], fontName=font, fontSize=9,
                                  alignment=TA_CENTER, textColor=HexColor('#6b7280'), spaceAfter=10),
        'heading': ParagraphStyle('ResumeHeading', parent=base['Heading2'], fontName=bold, fontSize=12,
                                  textColor=HexColor(accent), spaceBefore=10, spaceAfter=2),
        'entry': ParagraphStyle('ResumeEntry', parent=base['Normal'], fontName=bold, fontSize=10, spaceAfter=1),
        'meta': ParagraphStyle('ResumeMeta', parent=base['Normal'], fontName=font, fontSize=9,
                               textColor=HexColor('#6b7280'), spaceAfter=2),
        'body': ParagraphStyle('ResumeBody', parent=base['Normal'], fontName=font, fontSize=10, leading=13, spaceAfter=6),
    }


def _date_range(entry: Dict[str, Any]) -> str:
    start = (entry.get('startDate') or '').strip()
    end = (entry.get('endDate') or '').strip() or 'Present'
    return f'{start} - {end}' if start else ''


def _section(story: List, styles, title):
    story.append(Paragraph(escape(title.upper()), styles['heading']))
    story.append(HRFlowable(width='100%', thickness=0.6, color=styles['accent'], spaceAfter=4))


def build_resume_story(resume, styles) -> List:
    story = [Paragraph(escape(resume.name or 'Resume'), styles['name'])]
    contact = ' | '.join(escape(part) for part in (resume.email, resume.phone) if part)
    if contact:
        story.append(Paragraph(contact, styles['contact']))

    if resume.summary:
        _section(story, styles, 'Summary')
        story.append(Paragraph(escape(resume.summary), styles['body']))

    if resume.experience:
        _section(story, styles, 'Experience')
        for entry in resume.experience:
            heading = ' at '.join(escape(p) for p in (entry.get('role'), entry.get('company')) if p)
            story.append(Paragraph(heading or 'Experience', styles['entry']))
            dates = _date_range(entry)
            if dates:
                story.append(Paragraph(escape(dates), styles['meta']))
            if entry.get('description'):
                story.append(Paragraph(escape(entry['description']), styles['body']))

    if resume.education:
        _section(story, styles, 'Education')
        for entry in resume.education:
            heading = ', '.join(escape(p) for p in (entry.get('degree'), entry.get('school')) if p)
            story.append(Paragraph(heading or 'Education', styles['entry']))
            dates = _date_range(entry)
            if dates:
                story.append(Paragraph(escape(dates), styles['meta']))
            if entry.get('description'):
                story.append(Paragraph(escape(entry['description']), styles['body']))

    if resume.projects:
        _section(story, styles, 'Projects')
        for entry in resume.projects:
            story.append(Paragraph(escape(entry.get('title') or 'Project'), styles['entry']))
            if entry.get('link'):
                story.append(Paragraph(escape(entry['link']), styles['meta']))
            if entry.get('description'):
                story.append(Paragraph(escape(entry['description']), styles['body']))

    if resume.skills:
        _section(story, styles, 'Skills')
        story.append(Paragraph(escape(', '.join(resume.skills)), styles['body']))

    if resume.languages:
        _section(story, styles, 'Languages')
        story.append(Paragraph(escape(', '.join(resume.languages)), styles['body']))

    story.append(Spacer(1, 6))
    return story


def export_resume_pdf(resume) -> bytes:
    """Render ``resume`` to PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        leftMargin=0.7 * inch,
        rightMargin=0.7 * inch,
        title=f'{resume.name} - Resume',
    )
    try:
        doc.build(build_resume_story(resume, _styles(resume.template)))
    except (ValueError, TypeError) as exc:
        logger.error('Resume %s PDF rendering failed: %s', resume.pk, exc)
        raise ResumeExportError('Could not render resume PDF') from exc
    return buffer.getvalue()


def resume_filename(resume) -> str:
    base = (resume.name or 'Resume').strip().replace(' ', '_')
    return f'{base}_Resume.pdf'
