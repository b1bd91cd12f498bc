import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


def _render(pages: list[list[str] | None]) -> bytes:
    """Render one PDF page per entry; None draws a text-free block like a scanned page."""
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4)
    for lines in pages:
        if lines is None:
            pdf.setFillGray(0.4)
            pdf.rect(72, 120, 450, 600, stroke=0, fill=1)
        else:
            for offset, line in enumerate(lines):
                pdf.drawString(72, 760 - offset * 18, line)
        pdf.showPage()
    pdf.save()
    return buf.getvalue()


@pytest.fixture()
def incident_report_pdf_bytes() -> bytes:
    """Single-page police incident report with a text layer."""
    return _render([["Incident Report 2024-031", "Reported by: Officer J. Alvarez"]])


@pytest.fixture()
def witness_statement_pdf_bytes() -> bytes:
    """Two-page witness statement."""
    return _render([["Witness statement, page 1"], ["Witness statement, page 2"]])


@pytest.fixture()
def scanned_exhibit_pdf_bytes() -> bytes:
    """Two scanned pages: no text layer at all."""
    return _render([None, None])


@pytest.fixture()
def partly_scanned_pdf_bytes() -> bytes:
    """Typed cover page followed by a scanned signature page."""
    return _render([["Exhibit A: signed lease agreement"], None])
