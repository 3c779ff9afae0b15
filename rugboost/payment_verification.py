"""
Checkout-session confirmation.

Asks Stripe whether a checkout session has been paid, records the payment
against the payment and job rows, then notifies the business and the client.
Only a missing session id or a failed Stripe lookup is reported to the
caller as an error. Store writes and notifications are best-effort: their
failures are logged and never change the reported outcome.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from rugboost.email_service import (
    format_amount,
    send_client_payment_confirmation,
    send_staff_payment_notification,
)
from rugboost.errors import ValidationError
from rugboost.invoice_pdf import generate_invoice_pdf
from rugboost.models import ApprovedEstimate, Job, Notification, Payment, Profile
from rugboost.schemas import BusinessSummary, JobSummary, RugDetail, VerifyPaymentResult
from rugboost.stripe_service import retrieve_session

logger = logging.getLogger(__name__)

PAID = "paid"


def _format_dimensions(inspection) -> str:
    if inspection is None or not inspection.length or not inspection.width:
        return "N/A"
    return f"{inspection.length:g}' × {inspection.width:g}'"


def build_rug_details(estimates) -> list:
    rugs = []
    for estimate in estimates:
        inspection = estimate.inspection
        rugs.append(RugDetail(
            rugNumber=(inspection.rug_number if inspection else None) or "Unknown",
            rugType=(inspection.rug_type if inspection else None) or "Unknown",
            dimensions=_format_dimensions(inspection),
            services=estimate.services if isinstance(estimate.services, list) else [],
            total=float(estimate.total_amount or 0),
        ))
    return rugs


def mark_payment_completed(db: Session, session_id: str, payment_intent_id, paid_at) -> None:
    # Rows already completed are left alone so a repeat confirmation is a no-op
    try:
        db.execute(
            update(Payment)
            .where(Payment.stripe_checkout_session_id == session_id)
            .where(Payment.status != "completed")
            .values(status="completed", stripe_payment_intent_id=payment_intent_id, paid_at=paid_at)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating payment for session {session_id}: {e}")


def mark_job_paid(db: Session, job_id: str, approved_at) -> None:
    try:
        db.execute(
            update(Job)
            .where(Job.id == job_id)
            .values(payment_status="paid", client_approved_at=approved_at, status="in-progress")
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating job {job_id}: {e}")


def _load_context(db: Session, job_id: str):
    """
    Job, owner profile and rug details as plain values, so later commits and
    rollbacks never trigger a reload. Anything that can't be read comes back empty.
    """
    job, profile, rugs = None, None, []
    try:
        row = db.get(Job, job_id)
        if row is not None:
            job = JobSummary.model_validate(row)
        if job is not None and job.user_id:
            owner = db.query(Profile).filter_by(user_id=job.user_id).first()
            if owner is not None:
                profile = BusinessSummary.model_validate(owner)
        estimates = (
            db.query(ApprovedEstimate)
            .options(joinedload(ApprovedEstimate.inspection))
            .filter_by(job_id=job_id)
            .all()
        )
        rugs = [r.model_dump() for r in build_rug_details(estimates)]
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error loading notification context for job {job_id}: {e}")
    return job, profile, rugs


def create_payment_notification(db: Session, job: JobSummary, job_id: str, amount: int) -> None:
    try:
        db.add(Notification(
            user_id=job.user_id,
            type="payment_received",
            title=f"Payment Received - ${format_amount(amount)}",
            message=f"{job.client_name} has paid for Job #{job.job_number}. The job is now in progress.",
            details={
                "jobId": job_id,
                "jobNumber": job.job_number,
                "clientName": job.client_name,
                "amount": amount,
            },
        ))
        db.commit()
        logger.info(f"In-app notification created for job {job_id}")
    except Exception as e:
        db.rollback()
        logger.warning(f"In-app notification error for job {job_id}: {e}")


def notify_staff(job: JobSummary, profile: BusinessSummary, amount: int) -> None:
    try:
        send_staff_payment_notification(
            to=profile.business_email,
            business_name=profile.business_name,
            job_number=job.job_number,
            client_name=job.client_name,
            amount=amount,
        )
        logger.info(f"Staff email notification sent for job {job.id}")
    except Exception as e:
        logger.warning(f"Staff email notification error for job {job.id}: {e}")


def notify_client(job: JobSummary, profile, rugs: list, amount: int, paid_at) -> None:
    business = {
        "business_name": profile.business_name if profile else None,
        "business_email": profile.business_email if profile else None,
        "business_phone": profile.business_phone if profile else None,
    }

    pdf_base64 = None
    try:
        pdf_base64 = generate_invoice_pdf(
            job_number=job.job_number,
            client_name=job.client_name,
            client_email=job.client_email,
            amount=amount,
            rugs=rugs,
            business_address=profile.business_address if profile else None,
            paid_at=paid_at,
            **business,
        )
        logger.info(f"Invoice PDF generated for job {job.id}")
    except Exception as e:
        logger.warning(f"Invoice PDF generation failed for job {job.id}, sending without attachment: {e}")

    try:
        send_client_payment_confirmation(
            client_email=job.client_email,
            client_name=job.client_name,
            job_number=job.job_number,
            amount=amount,
            rugs=rugs,
            pdf_base64=pdf_base64,
            **business,
        )
        logger.info(f"Client confirmation sent for job {job.id}")
    except Exception as e:
        logger.warning(f"Client confirmation error for job {job.id}: {e}")


def confirm_payment(session_id, db: Session) -> VerifyPaymentResult:
    """
    Confirm a Stripe checkout session and fan out the payment side effects.

    Raises:
        ValidationError: no session id was given
        ProviderError: Stripe could not return the session
    """
    if not session_id:
        raise ValidationError("Session ID is required")

    session = retrieve_session(session_id)
    logger.info(f"Verifying session: {session_id} Status: {session.status}")

    if session.status != PAID:
        return VerifyPaymentResult(success=False, amount=session.amount, status=session.status)

    now = datetime.now(timezone.utc)
    mark_payment_completed(db, session_id, session.payment_intent_id, now)

    job_id = session.job_id
    if not job_id:
        return VerifyPaymentResult(success=True, amount=session.amount, status=session.status)

    mark_job_paid(db, job_id, now)
    job, profile, rugs = _load_context(db, job_id)

    if job is not None and job.user_id:
        create_payment_notification(db, job, job_id, session.amount)

    if job is not None and profile is not None and profile.business_email:
        notify_staff(job, profile, session.amount)

    if job is not None and job.client_email:
        notify_client(job, profile, rugs, session.amount, now)

    return VerifyPaymentResult(
        success=True,
        amount=session.amount,
        jobNumber=(job.job_number if job else None) or "",
        clientName=(job.client_name if job else None) or "",
    )
