"""
Payslip PDF Generator

One page per payroll entry:
- Header with branch name and period metadata
- Employee block
- Earnings table (regular, overtime, gross)
- Deductions and net pay
- Footer with confidentiality notice and record hash, if stored
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from io import BytesIO
import re

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_LEFT, TA_RIGHT, TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle

# Built-in PDF fonts have no peso sign
PDF_CURRENCY_LABEL = "PHP"

INK = colors.HexColor('#3b2a20')
ESPRESSO = colors.HexColor('#5b3a29')
CREAM = colors.HexColor('#faf6f0')
RULE = colors.HexColor('#d6c7b5')
MUTED = colors.HexColor('#7a6a5c')
TEXT = colors.HexColor('#2f2a26')

CONTENT_WIDTH = 6.8 * inch


def sanitize_html(text: str) -> str:
    """Escape text for a Paragraph; tags we add ourselves (like <b>) go around it."""
    if not text:
        return ""
    text = str(text)
    text = re.sub(r'<script[^>]*>.*?</script>', '', text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r'&(?!\w+;)', '&amp;', text)
    return text.replace("<", "&lt;").replace(">", "&gt;")


def _money(value) -> str:
    return f"{PDF_CURRENCY_LABEL} {Decimal(value):,.2f}"


def _hours(value) -> str:
    return f"{Decimal(value):,.2f}"


def _build_styles() -> dict:
    base = getSampleStyleSheet()['Normal']
    cell = ParagraphStyle('PsCell', parent=base, fontSize=9, textColor=TEXT, leading=11)
    head = ParagraphStyle(
        'PsHead', parent=base, fontSize=9.5, fontName='Helvetica-Bold',
        textColor=colors.white, alignment=TA_CENTER, leading=11,
    )
    label = ParagraphStyle('PsLabel', parent=base, fontSize=8, textColor=MUTED, alignment=TA_LEFT, leading=10)
    return {
        'branch': ParagraphStyle('PsBranch', parent=base, fontSize=14, fontName='Helvetica-Bold', textColor=INK, leading=16),
        'title': ParagraphStyle(
            'PsTitle', parent=base, fontSize=16, fontName='Helvetica-Bold',
            textColor=INK, spaceAfter=12, leading=19,
        ),
        'label': label,
        'value': ParagraphStyle('PsValue', parent=label, textColor=TEXT, fontName='Helvetica-Bold'),
        'cell': cell,
        'cell_right': ParagraphStyle('PsCellRight', parent=cell, alignment=TA_RIGHT),
        'cell_bold': ParagraphStyle('PsCellBold', parent=cell, fontName='Helvetica-Bold'),
        'head': head,
        'total_left': ParagraphStyle('PsTotalLeft', parent=head, alignment=TA_LEFT),
        'total_right': ParagraphStyle('PsTotalRight', parent=head, alignment=TA_RIGHT),
        'footer': ParagraphStyle('PsFooter', parent=base, fontSize=7.5, textColor=MUTED, alignment=TA_CENTER, leading=10),
    }


def _header(branch_name: str, payslip: dict, generated_at: datetime, st: dict) -> list:
    status_value = payslip['status']
    period = f"{payslip['period_start']:%b %d, %Y} - {payslip['period_end']:%b %d, %Y}"
    rows = [
        ("Pay Period:", period),
        ("Status:", str(getattr(status_value, 'value', status_value)).title()),
        ("Generated:", f"{generated_at:%b %d, %Y at %I:%M %p} UTC"),
    ]
    meta = Table(
        [[Paragraph(f"<b>{k}</b>", st['label']), Paragraph(sanitize_html(v), st['value'])] for k, v in rows],
        colWidths=[1.0 * inch, 2.4 * inch],
    )
    top = Table(
        [[Paragraph(sanitize_html(branch_name), st['branch']), meta]],
        colWidths=[CONTENT_WIDTH - 3.4 * inch, 3.4 * inch],
    )
    top.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (0, -1), 0),
        ('RIGHTPADDING', (-1, 0), (-1, -1), 0),
    ]))

    rule = Table([['']], colWidths=[CONTENT_WIDTH], rowHeights=[2])
    rule.setStyle(TableStyle([('LINEBELOW', (0, 0), (-1, -1), 1.5, RULE)]))

    return [top, Spacer(1, 0.2 * inch), rule, Spacer(1, 0.25 * inch), Paragraph("Payslip", st['title'])]


def _employee_block(payslip: dict, st: dict) -> Table:
    fields = [
        ("Employee", sanitize_html(payslip['employee_name'])),
        ("Employee ID", sanitize_html(str(payslip['employee_id']))),
        ("Position", sanitize_html(payslip['position'])),
        ("Hourly Rate", _money(payslip['hourly_rate'])),
    ]
    block = Table(
        [[Paragraph(name, st['cell_bold']), Paragraph(value, st['cell'])] for name, value in fields],
        colWidths=[1.6 * inch, CONTENT_WIDTH - 1.6 * inch],
    )
    block.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), CREAM),
        ('BOX', (0, 0), (-1, -1), 0.75, RULE),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    return block


def _earnings_table(payslip: dict, st: dict) -> Table:
    regular_pay = Decimal(payslip['regular_hours']) * Decimal(payslip['hourly_rate'])
    overtime_pay = Decimal(payslip['gross_pay']) - regular_pay

    def line(label, hours, amount):
        return [
            Paragraph(label, st['cell']),
            Paragraph(hours, st['cell_right']),
            Paragraph(amount, st['cell_right']),
        ]

    rows = [
        [Paragraph(h, st['head']) for h in ("Item", "Hours", "Amount")],
        line("Regular", _hours(payslip['regular_hours']), _money(regular_pay)),
        line("Overtime (1.5x)", _hours(payslip['overtime_hours']), _money(overtime_pay)),
        line("<b>Gross Pay</b>", _hours(payslip['total_hours']), f"<b>{_money(payslip['gross_pay'])}</b>"),
        line("Deductions", "", f"- {_money(payslip['deductions'])}"),
        [
            Paragraph("NET PAY", st['total_left']),
            Paragraph("", st['total_right']),
            Paragraph(_money(payslip['net_pay']), st['total_right']),
        ],
    ]
    table = Table(rows, colWidths=[3.4 * inch, 1.4 * inch, 2.0 * inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), INK),
        ('BACKGROUND', (0, -1), (-1, -1), ESPRESSO),
        ('ROWBACKGROUNDS', (0, 1), (-1, -2), [colors.white, CREAM]),
        ('LINEBELOW', (0, 0), (-1, -2), 0.5, RULE),
        ('BOX', (0, 0), (-1, -1), 0.75, RULE),
        ('TOPPADDING', (0, 0), (-1, -1), 8),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]))
    return table


def generate_payslip_pdf(
    branch_name: str,
    payslip: dict,
    generated_at: Optional[datetime] = None,
    record_hash: Optional[str] = None,
) -> bytes:
    """
    Generate a payslip PDF.

    Args:
        branch_name: Branch shown in the header
        payslip: Payslip data as returned by payroll_service.get_payslip
        generated_at: Generation timestamp (defaults to now, UTC)
        record_hash: Stored blockchain hash of the entry, if any

    Returns:
        PDF bytes
    """
    generated_at = generated_at or datetime.utcnow()
    st = _build_styles()

    story = _header(branch_name, payslip, generated_at, st)
    story += [
        _employee_block(payslip, st),
        Spacer(1, 0.3 * inch),
        _earnings_table(payslip, st),
        Spacer(1, 0.4 * inch),
    ]
    if record_hash:
        story.append(Paragraph(f"Record hash: {sanitize_html(record_hash)}", st['footer']))
    story.append(Paragraph(
        "This payslip is confidential and intended only for the named employee.",
        st['footer'],
    ))

    with BytesIO() as buffer:
        SimpleDocTemplate(
            buffer,
            pagesize=letter,
            leftMargin=0.6 * inch,
            rightMargin=0.6 * inch,
            topMargin=0.65 * inch,
            bottomMargin=0.65 * inch,
            title=f"Payslip - {payslip['employee_name']}",
        ).build(story)
        return buffer.getvalue()
