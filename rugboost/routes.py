import logging

import stripe
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from rugboost.auth import AuthUser, verify_token
from rugboost.database import SessionLocal
from rugboost.errors import PaymentServiceError, ValidationError
from rugboost.models import ClientAccount, ClientJobAccess, Payment
from rugboost.payment_verification import confirm_payment
from rugboost.rate_limiter import checkout_limiter
from rugboost.schemas import CheckoutRequest, VerifyPaymentRequest
from rugboost.stripe_service import create_checkout_session, find_customer_id

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error(message: str, status_code: int, extra: dict = None, headers: dict = None):
    content = {"error": message}
    content.update(extra or {})
    return JSONResponse(
        content=content,
        status_code=status_code,
        headers={**CORS_HEADERS, **(headers or {})},
    )


def _confirm(session_id):
    db = SessionLocal()
    try:
        return confirm_payment(session_id, db)
    finally:
        db.close()


@router.options("/verify-payment")
@router.options("/create-checkout-session")
def preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/verify-payment")
async def verify_payment(request: Request):
    try:
        try:
            body = VerifyPaymentRequest.model_validate(await request.json())
        except ValueError:
            raise ValidationError("Session ID is required")

        result = await run_in_threadpool(_confirm, body.sessionId)
    except PaymentServiceError as e:
        logger.error(f"Error verifying payment: {e}")
        return _error(str(e), 500, extra={"success": False})

    return JSONResponse(content=result.model_dump(exclude_none=True), headers=CORS_HEADERS)


@router.post("/create-checkout-session")
def create_checkout(request: CheckoutRequest, user: AuthUser = Depends(verify_token)):
    allowed, retry_after = checkout_limiter.check(user.id)
    if not allowed:
        logger.warning(f"Rate limit exceeded for user {user.id}")
        return _error(
            "Too many checkout attempts. Please try again later.",
            429,
            extra={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )

    if not (request.jobId and request.clientJobAccessId and request.selectedServices and request.totalAmount):
        return _error("Missing required fields: jobId, clientJobAccessId, selectedServices, totalAmount", 500)

    db = SessionLocal()
    try:
        client_account = db.query(ClientAccount).filter_by(user_id=user.id).first()
        if not client_account:
            logger.error(f"Client account not found for user: {user.id}")
            return _error("Client account not found", 403)

        access = (
            db.query(ClientJobAccess)
            .filter_by(id=request.clientJobAccessId, job_id=request.jobId, client_id=client_account.id)
            .first()
        )
        if not access:
            logger.error(f"Unauthorized job access attempt: user={user.id} job={request.jobId}")
            return _error("Unauthorized access to job", 403)

        email = user.email or request.customerEmail
        if not email:
            return _error("Customer email is required", 500)

        line_items = [
            {
                "price_data": {
                    "currency": "usd",
                    "product_data": {
                        "name": service.name,
                        "description": f"{rug.rugNumber} - {service.name}",
                    },
                    "unit_amount": round(service.unitPrice * 100),
                },
                "quantity": service.quantity,
            }
            for rug in request.selectedServices
            for service in rug.services
        ]

        try:
            session = create_checkout_session(
                line_items=line_items,
                email=email,
                customer_id=find_customer_id(email),
                success_url=request.successUrl,
                cancel_url=request.cancelUrl,
                metadata={
                    "jobId": request.jobId,
                    "clientJobAccessId": request.clientJobAccessId,
                    "userId": user.id,
                },
                intent_metadata={
                    "jobId": request.jobId,
                    "clientJobAccessId": request.clientJobAccessId,
                },
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating checkout session: {e}")
            return _error(str(e), 500)

        try:
            # Only one pending payment per job
            db.query(Payment).filter_by(job_id=request.jobId, status="pending").delete()
            db.add(Payment(
                job_id=request.jobId,
                client_id=client_account.id,
                stripe_checkout_session_id=session.id,
                amount=request.totalAmount,
                status="pending",
                details={
                    "selectedServices": [rug.model_dump() for rug in request.selectedServices],
                    "clientJobAccessId": request.clientJobAccessId,
                },
            ))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error recording pending payment for session {session.id}: {e}")
            return _error("Failed to record payment", 500)
    finally:
        db.close()

    logger.info(f"Checkout session created: {session.id}")
    return JSONResponse(
        content={"checkoutUrl": session.url, "sessionId": session.id},
        headers=CORS_HEADERS,
    )
