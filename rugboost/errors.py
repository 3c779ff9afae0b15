class PaymentServiceError(Exception):
    """Base class for errors raised by the payment service."""


class ValidationError(PaymentServiceError):
    """The request is missing required input."""


class ProviderError(PaymentServiceError):
    """The payment provider could not be reached or rejected the lookup."""


class EmailError(PaymentServiceError):
    """An outbound email could not be sent."""


class InvoiceError(PaymentServiceError):
    """The invoice PDF could not be rendered."""


class AuthenticationError(PaymentServiceError):
    """The request carries no valid bearer token."""
