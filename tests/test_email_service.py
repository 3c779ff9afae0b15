import pytest

from rugboost import email_service
from rugboost.errors import EmailError


@pytest.fixture
def resend_send(mocker, monkeypatch):
    monkeypatch.setattr(email_service, "RESEND_API_KEY", "re_test")
    return mocker.patch("resend.Emails.send", return_value={"id": "email_1"})


def test_send_email_requires_api_key(monkeypatch, mocker):
    monkeypatch.setattr(email_service, "RESEND_API_KEY", None)
    send = mocker.patch("resend.Emails.send")

    with pytest.raises(EmailError):
        email_service.send_email("a@b.com", "Hi", "<p>Hi</p>")
    send.assert_not_called()


def test_send_email_wraps_provider_errors(resend_send):
    resend_send.side_effect = RuntimeError("rate limited")

    with pytest.raises(EmailError, match="rate limited"):
        email_service.send_email("a@b.com", "Hi", "<p>Hi</p>")


def test_staff_notification_formats_amount(resend_send):
    email_service.send_staff_payment_notification(
        to="owner@example.test",
        business_name="Clean Rugs Co",
        job_number="JOB-1",
        client_name="Ada <script>",
        amount=12345,
    )

    params = resend_send.call_args.args[0]
    assert params["to"] == ["owner@example.test"]
    assert params["subject"] == "Payment Received: $123.45 from Ada <script>"
    assert "$123.45" in params["html"]
    assert "<script>" not in params["html"]


def test_client_confirmation_attaches_invoice(resend_send):
    email_service.send_client_payment_confirmation(
        client_email="a@b.com",
        client_name="Ada",
        job_number="JOB-1",
        amount=5000,
        rugs=[{"rugNumber": "R-1", "rugType": "Persian", "dimensions": "8' × 10'",
               "services": [{"name": "Deep Wash"}], "total": 50}],
        business_email="owner@example.test",
        pdf_base64="JVBERi0=",
    )

    params = resend_send.call_args.args[0]
    assert params["attachments"] == [{"filename": "Invoice-JOB-1.pdf", "content": "JVBERi0="}]
    assert params["reply_to"] == "owner@example.test"
    assert "Deep Wash" in params["html"]


def test_client_confirmation_without_invoice(resend_send):
    email_service.send_client_payment_confirmation(
        client_email="a@b.com", client_name=None, job_number="JOB-2", amount=0, rugs=[],
    )

    params = resend_send.call_args.args[0]
    assert "attachments" not in params
    assert "reply_to" not in params
