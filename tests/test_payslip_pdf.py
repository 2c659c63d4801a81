"""
Tests for payslip PDF generation.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from cafeshift.pdf_templates.payslip import generate_payslip_pdf, sanitize_html


def _payslip(**overrides):
    payslip = {
        "entry_id": uuid.uuid4(),
        "employee_name": "Jamie <Barista> & Co",
        "employee_id": uuid.uuid4(),
        "position": "Barista",
        "period_start": datetime(2026, 1, 5),
        "period_end": datetime(2026, 1, 12),
        "regular_hours": Decimal(40),
        "overtime_hours": Decimal(5),
        "total_hours": Decimal(45),
        "hourly_rate": Decimal(15),
        "gross_pay": Decimal("712.5"),
        "deductions": Decimal("106.875"),
        "net_pay": Decimal("605.625"),
        "status": "pending",
        "blockchain_hash": None,
    }
    payslip.update(overrides)
    return payslip


def test_sanitize_html():
    """Special characters are escaped and script blocks removed."""
    assert "&amp;" in sanitize_html("Beans & Brews")
    assert "&lt;" in sanitize_html("<b>Bold</b>")
    assert "alert" not in sanitize_html("<script>alert('xss')</script>")
    assert sanitize_html(None) == ""
    assert sanitize_html("") == ""


def test_generate_payslip_pdf_returns_bytes():
    pdf_bytes = generate_payslip_pdf(
        branch_name="Main Street Cafe",
        payslip=_payslip(),
        generated_at=datetime(2026, 1, 13, 9, 30),
    )
    assert isinstance(pdf_bytes, bytes)
    # PDF files start with %PDF
    assert pdf_bytes[:4] == b"%PDF"


def test_generate_payslip_pdf_with_record_hash():
    record_hash = "a" * 64
    pdf_bytes = generate_payslip_pdf(
        branch_name="Main Street Cafe",
        payslip=_payslip(blockchain_hash=record_hash),
        record_hash=record_hash,
    )
    assert pdf_bytes[:4] == b"%PDF"
    assert len(pdf_bytes) > 1000
