import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def heat_sheet_pdf_bytes() -> bytes:
    """Generate a three-page heat sheet where Jane Doe swims twice."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Winter Invitational - Session 2 - Saturday")
    c.showPage()
    c.drawString(72, 720, "Event 5 Girls 11-12 100 Free")
    c.drawString(72, 700, "Heat 1 Lane 3 Doe, Jane 12 SHARK 1:05.32")
    c.drawString(72, 680, "Heat 1 Lane 4 Liu, Elsa 12 SHARK 1:04.10")
    c.showPage()
    c.drawString(72, 720, "Event 9 Girls 11-12 50 Back")
    c.drawString(72, 700, "Heat 2 Lane 5 Jane Doe 12 SHARK 35.01")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()
