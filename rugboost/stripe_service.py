import logging

import stripe

from rugboost.config import STRIPE_SECRET_KEY, STRIPE_TIMEOUT_SECONDS
from rugboost.errors import ProviderError
from rugboost.schemas import ProviderSession

logger = logging.getLogger(__name__)

stripe.api_key = STRIPE_SECRET_KEY
stripe.default_http_client = stripe.RequestsClient(timeout=STRIPE_TIMEOUT_SECONDS)


def _intent_id(payment_intent):
    # Expanded sessions carry the PaymentIntent object, others only its id
    if payment_intent is None or isinstance(payment_intent, str):
        return payment_intent
    return getattr(payment_intent, "id", None)


def retrieve_session(session_id: str) -> ProviderSession:
    try:
        session = stripe.checkout.Session.retrieve(session_id, expand=["payment_intent"])
    except stripe.StripeError as e:
        logger.error(f"Stripe session lookup failed for {session_id}: {e}")
        raise ProviderError(str(e)) from e

    if session is None:
        raise ProviderError(f"Checkout session {session_id} not found")

    metadata = getattr(session, "metadata", None)
    return ProviderSession(
        id=session_id,
        status=getattr(session, "payment_status", None),
        amount=getattr(session, "amount_total", None) or 0,
        payment_intent_id=_intent_id(getattr(session, "payment_intent", None)),
        job_id=getattr(metadata, "jobId", None) if metadata is not None else None,
    )


def find_customer_id(email: str):
    customers = stripe.Customer.list(email=email, limit=1)
    if customers.data:
        return customers.data[0].id
    return None


def create_checkout_session(
    line_items: list,
    email: str,
    customer_id,
    success_url: str,
    cancel_url: str,
    metadata: dict,
    intent_metadata: dict,
):
    return stripe.checkout.Session.create(
        customer=customer_id,
        customer_email=None if customer_id else email,
        line_items=line_items,
        mode="payment",
        success_url=success_url,
        cancel_url=cancel_url,
        metadata=metadata,
        payment_intent_data={"metadata": intent_metadata},
    )
