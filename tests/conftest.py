import os

# The app reads DATABASE_URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_app.db")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rugboost.database import Base
from rugboost.main import app as fastapi_app
from rugboost.models import ApprovedEstimate, Inspection, Job, Payment, Profile
from rugboost.rate_limiter import checkout_limiter

SQLALCHEMY_DATABASE_URL = "sqlite:///./test_temp.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    checkout_limiter.reset()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(monkeypatch):
    # Point every SessionLocal user at the test database
    monkeypatch.setattr("rugboost.routes.SessionLocal", TestingSessionLocal)
    monkeypatch.setattr("rugboost.main.SessionLocal", TestingSessionLocal)
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def paid_job(db):
    """Job job_42 with an owner profile, one inspected rug and a pending payment for cs_test_1."""
    db.add(Job(id="job_42", user_id="owner_1", job_number="JOB-0042",
               client_name="Ada Client", client_email="a@b.com"))
    db.add(Profile(user_id="owner_1", business_name="Clean Rugs Co",
                   business_email="owner@cleanrugs.test", business_phone="555-0100",
                   business_address="1 Loom St"))
    db.add(Inspection(id="insp_1", job_id="job_42", rug_number="R-1",
                      rug_type="Persian", length=8, width=10))
    db.add(ApprovedEstimate(job_id="job_42", inspection_id="insp_1", total_amount=150,
                            services=[{"id": "s1", "name": "Deep Wash", "quantity": 1, "unitPrice": 150}]))
    db.add(Payment(job_id="job_42", stripe_checkout_session_id="cs_test_1",
                   amount=150, status="pending"))
    db.commit()
    return "job_42"
