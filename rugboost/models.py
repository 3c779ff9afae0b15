import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from rugboost.database import Base


def _uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, index=True)
    client_id = Column(String)
    stripe_checkout_session_id = Column(String, unique=True, index=True)
    stripe_payment_intent_id = Column(String)
    amount = Column(Numeric(10, 2))                # dollars
    currency = Column(String, default="usd")
    status = Column(String, default="pending")     # pending | completed
    paid_at = Column(DateTime(timezone=True))
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=_now)


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, index=True)           # owning business
    job_number = Column(String)
    client_name = Column(String)
    client_email = Column(String)
    status = Column(String, default="active")
    payment_status = Column(String, default="unpaid")  # unpaid | paid
    client_approved_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=_now)

    estimates = relationship("ApprovedEstimate", back_populates="job")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, unique=True, index=True)
    business_name = Column(String)
    business_email = Column(String)
    business_phone = Column(String)
    business_address = Column(Text)


class Inspection(Base):
    __tablename__ = "inspections"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
    rug_number = Column(String)
    rug_type = Column(String)
    length = Column(Float)
    width = Column(Float)


class ApprovedEstimate(Base):
    __tablename__ = "approved_estimates"

    id = Column(String, primary_key=True, default=_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
    inspection_id = Column(String, ForeignKey("inspections.id"))
    services = Column(JSON, default=list)
    total_amount = Column(Numeric(10, 2))

    job = relationship("Job", back_populates="estimates")
    inspection = relationship("Inspection")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, index=True)
    type = Column(String)
    title = Column(String)
    message = Column(Text)
    details = Column("metadata", JSON, default=dict)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=_now)


class ClientAccount(Base):
    __tablename__ = "client_accounts"

    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, unique=True, index=True)
    email = Column(String)


class ClientJobAccess(Base):
    __tablename__ = "client_job_access"

    id = Column(String, primary_key=True, default=_uuid)
    client_id = Column(String, ForeignKey("client_accounts.id"), index=True)
    job_id = Column(String, ForeignKey("jobs.id"), index=True)
