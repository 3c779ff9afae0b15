import logging

import stripe
from fastapi import FastAPI, Request, Header, HTTPException
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from rugboost.config import LOG_LEVEL, STRIPE_WEBHOOK_SECRET
from rugboost.database import Base, engine, SessionLocal
from rugboost.errors import AuthenticationError, ProviderError
from rugboost.payment_verification import confirm_payment
from rugboost.routes import CORS_HEADERS, router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("stripe").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

app = FastAPI(title="Rugboost Payment Service")

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"error": str(exc)}, headers=CORS_HEADERS)


def _confirm_session(session_id):
    db = SessionLocal()
    try:
        return confirm_payment(session_id, db)
    finally:
        db.close()


@app.post("/webhook")
async def stripe_webhook(request: Request, stripe_signature: str = Header(None)):
    payload = await request.body()

    try:
        event = stripe.Webhook.construct_event(
            payload,
            stripe_signature,
            STRIPE_WEBHOOK_SECRET
        )
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    if event["type"] == "checkout.session.completed":
        session_id = event["data"]["object"]["id"]
        try:
            await run_in_threadpool(_confirm_session, session_id)
        except ProviderError as e:
            logger.error(f"Webhook confirmation failed for session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Payment provider lookup failed")

    return {"ok": True}
