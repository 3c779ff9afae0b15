from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VerifyPaymentRequest(BaseModel):
    sessionId: Optional[str] = None


class VerifyPaymentResult(BaseModel):
    success: bool
    amount: Optional[int] = None
    jobNumber: Optional[str] = None
    clientName: Optional[str] = None
    status: Optional[str] = None


class ProviderSession(BaseModel):
    """What the payment provider reports for one checkout session."""

    id: str
    status: Optional[str] = None
    amount: int = 0                   # minor units (cents)
    payment_intent_id: Optional[str] = None
    job_id: Optional[str] = None


class JobSummary(BaseModel):
    """Job fields the payment notifications need, detached from the session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    job_number: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None


class BusinessSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    business_name: Optional[str] = None
    business_email: Optional[str] = None
    business_phone: Optional[str] = None
    business_address: Optional[str] = None


class RugDetail(BaseModel):
    rugNumber: str = "Unknown"
    rugType: str = "Unknown"
    dimensions: str = "N/A"
    services: list = Field(default_factory=list)
    total: float = 0


class CheckoutService(BaseModel):
    id: Optional[str] = None
    name: str
    quantity: int = 1
    unitPrice: float


class CheckoutRug(BaseModel):
    rugNumber: str
    services: List[CheckoutService] = Field(default_factory=list)


class CheckoutRequest(BaseModel):
    jobId: Optional[str] = None
    clientJobAccessId: Optional[str] = None
    selectedServices: List[CheckoutRug] = Field(default_factory=list)
    totalAmount: Optional[float] = None
    customerEmail: Optional[str] = None
    successUrl: Optional[str] = None
    cancelUrl: Optional[str] = None
