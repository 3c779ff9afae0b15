"""
Outbound email through Resend.

Payment emails sent after a checkout session is confirmed: a staff
notification for the business owner and a receipt for the client, which may
carry the invoice PDF as an attachment.
"""

import logging
from html import escape
from typing import Optional, Union

import resend

from rugboost.config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from rugboost.errors import EmailError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def format_amount(amount_cents) -> str:
    return f"{(amount_cents or 0) / 100:.2f}"


def send_email(
    to: Union[str, list],
    subject: str,
    html: str,
    attachments: Optional[list] = None,
    reply_to: Optional[str] = None,
) -> dict:
    """
    Send an email with Resend.

    Args:
        to: Recipient email(s)
        subject: Subject line
        html: Rendered HTML body
        attachments: Optional list of {"filename", "content"} dicts, content base64
        reply_to: Optional reply-to address

    Returns:
        Resend response dict
    """
    if not RESEND_API_KEY:
        logger.error("No email service configured - RESEND_API_KEY missing")
        raise EmailError("Email service not configured")

    recipients = [to] if isinstance(to, str) else to
    params = {
        "from": EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": html,
    }
    if reply_to:
        params["reply_to"] = reply_to
    if attachments:
        params["attachments"] = [
            {"filename": a["filename"], "content": a["content"]} for a in attachments
        ]

    try:
        logger.info(f"Sending email via Resend to: {recipients}")
        response = resend.Emails.send(params)
        logger.info(f"Email sent via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"Email send error to {recipients}: {e}")
        raise EmailError(f"Failed to send email: {e}") from e


def _rug_rows(rugs: list) -> str:
    rows = []
    for rug in rugs:
        services = ", ".join(
            escape(str(s.get("name", ""))) for s in rug.get("services", []) if isinstance(s, dict)
        )
        rows.append(
            "<tr>"
            f"<td>{escape(str(rug.get('rugNumber', 'Unknown')))}</td>"
            f"<td>{escape(str(rug.get('rugType', 'Unknown')))}</td>"
            f"<td>{escape(str(rug.get('dimensions', 'N/A')))}</td>"
            f"<td>{services or '-'}</td>"
            f"<td>${float(rug.get('total') or 0):,.2f}</td>"
            "</tr>"
        )
    return "".join(rows)


def send_staff_payment_notification(
    to: str,
    business_name: Optional[str],
    job_number: Optional[str],
    client_name: Optional[str],
    amount: int,
) -> dict:
    """Tell the business owner a client has paid."""
    formatted = format_amount(amount)
    html = f"""
    <h2>Payment Received</h2>
    <p>Hi {escape(business_name or 'there')},</p>
    <p><strong>{escape(client_name or 'Your client')}</strong> has paid
    <strong>${formatted}</strong> for Job #{escape(job_number or '')}.</p>
    <p>The job has been moved to in progress.</p>
    """
    return send_email(
        to=to,
        subject=f"Payment Received: ${formatted} from {client_name or 'client'}",
        html=html,
    )


def send_client_payment_confirmation(
    client_email: str,
    client_name: Optional[str],
    job_number: Optional[str],
    amount: int,
    rugs: list,
    business_name: Optional[str] = None,
    business_email: Optional[str] = None,
    business_phone: Optional[str] = None,
    pdf_base64: Optional[str] = None,
) -> dict:
    """Send the client their payment receipt, with the invoice attached when available."""
    business = escape(business_name or "Rugboost")
    contact = " | ".join(escape(c) for c in (business_email, business_phone) if c)
    html = f"""
    <h2>Payment Confirmed</h2>
    <p>Hi {escape(client_name or 'there')},</p>
    <p>Thank you! Your payment of <strong>${format_amount(amount)}</strong>
    for Job #{escape(job_number or '')} has been received. {business} will
    begin work on your rugs shortly.</p>
    <table>
      <tr><th>Rug</th><th>Type</th><th>Size</th><th>Services</th><th>Total</th></tr>
      {_rug_rows(rugs)}
    </table>
    <p>{contact}</p>
    """
    attachments = None
    if pdf_base64:
        attachments = [{"filename": f"Invoice-{job_number or 'receipt'}.pdf", "content": pdf_base64}]

    return send_email(
        to=client_email,
        subject=f"Payment Confirmed - Job #{job_number or ''}",
        html=html,
        attachments=attachments,
        reply_to=business_email,
    )
