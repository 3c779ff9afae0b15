"""
Invoice PDF rendering with ReportLab.

The PDF is returned base64-encoded so it can go straight into an email
attachment.
"""

import base64
import io
import logging
from datetime import datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from rugboost.errors import InvoiceError

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.HexColor("#2563eb")
DARK_GRAY = colors.HexColor("#1e293b")
LIGHT_GRAY = colors.HexColor("#f1f5f9")


def _service_lines(rugs: list) -> list:
    rows = [["Rug", "Service", "Qty", "Unit", "Amount"]]
    for rug in rugs:
        services = rug.get("services") or []
        if not services:
            rows.append([rug.get("rugNumber", "Unknown"), "-", "", "", f"${float(rug.get('total') or 0):,.2f}"])
            continue
        for service in services:
            if not isinstance(service, dict):
                continue
            qty = service.get("quantity") or 1
            unit = float(service.get("unitPrice") or 0)
            rows.append([
                rug.get("rugNumber", "Unknown"),
                service.get("name", ""),
                str(qty),
                f"${unit:,.2f}",
                f"${unit * qty:,.2f}",
            ])
    return rows


def generate_invoice_pdf(
    job_number: Optional[str],
    client_name: Optional[str],
    client_email: Optional[str],
    amount: int,
    rugs: list,
    business_name: Optional[str] = None,
    business_email: Optional[str] = None,
    business_phone: Optional[str] = None,
    business_address: Optional[str] = None,
    paid_at: Optional[datetime] = None,
) -> str:
    """Render a paid invoice and return it base64-encoded. `amount` is in cents."""
    logger.info(f"Generating invoice PDF for job {job_number}")
    margin = 0.75 * inch

    try:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=margin,
            leftMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=f"Invoice - Job #{job_number or ''}",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=22,
            textColor=BRAND_COLOR,
            spaceAfter=12,
        )
        body_style = ParagraphStyle(
            "InvoiceBody",
            parent=styles["Normal"],
            fontSize=10,
            textColor=DARK_GRAY,
            spaceAfter=4,
        )

        story = [Paragraph(escape(business_name or "Rugboost"), title_style)]
        for line in (business_address, business_email, business_phone):
            if line:
                story.append(Paragraph(escape(line), body_style))
        story.append(Spacer(1, 0.3 * inch))

        paid_on = (paid_at or datetime.now()).strftime("%B %d, %Y")
        story.append(Paragraph(f"<b>Invoice for Job #{escape(job_number or '')}</b>", body_style))
        story.append(Paragraph(f"Billed to: {escape(client_name or 'Unknown')} ({escape(client_email or 'N/A')})", body_style))
        story.append(Paragraph(f"Paid: {paid_on}", body_style))
        story.append(Spacer(1, 0.25 * inch))

        table = Table(_service_lines(rugs), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_GRAY]),
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
        ]))
        story.append(table)
        story.append(Spacer(1, 0.25 * inch))
        story.append(Paragraph(f"<b>Total paid: ${(amount or 0) / 100:,.2f}</b>", body_style))

        doc.build(story)
    except Exception as e:
        logger.error(f"Invoice PDF rendering failed for job {job_number}: {e}")
        raise InvoiceError(str(e)) from e

    return base64.b64encode(buffer.getvalue()).decode("ascii")
