import asyncio
import re
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from procure_marine.cart.domain.entities import Cart, CartItem
from procure_marine.checkout.application.pipeline import (
    DISPATCH_FAILED_MESSAGE, UNEXPECTED_FAILURE_MESSAGE, OrderSubmissionPipeline
)
from procure_marine.checkout.domain.entities import (
    CheckoutState, ContactInfo, DeliveryInfo, SubmissionOutcome
)
from procure_marine.core.config import Settings
from procure_marine.email.domain.exceptions import EmailSendingException
from procure_marine.email.models import EmailSendResult

from conftest import MockEmailSender, make_product

FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)

CONTACT = ContactInfo(full_name="Jane Mariner", email="jane@shipping.ae", phone="+971 4 123 4567")
DELIVERY = DeliveryInfo(location="Jebel Ali Port")

@pytest.fixture
def cart() -> Cart:
    return Cart(items=(
        CartItem(product=make_product("a", amount="100.00"), quantity=2),
        CartItem(product=make_product("b", amount=None), quantity=3),
    ))

@pytest.fixture
def test_settings() -> Settings:
    return Settings(ORDER_NOTIFICATION_EMAIL="orders-test@procuremarine.com", DISPATCH_TIMEOUT_SECONDS=0.05)

def _pipeline(sender, settings, **kwargs) -> OrderSubmissionPipeline:
    kwargs.setdefault("clock", lambda: FIXED_NOW)
    return OrderSubmissionPipeline(
        email_sender=sender,
        settings=settings,
        sender_address="Procure Marine Orders <orders@procuremarine.com>",
        **kwargs,
    )

@pytest.mark.asyncio
async def test_successful_submission(cart, test_settings, mock_email_sender):
    pipeline = _pipeline(mock_email_sender, test_settings)

    result = await pipeline.submit(CONTACT, DELIVERY, cart, additional_notes="Urgent")

    assert result.success is True
    assert result.outcome == SubmissionOutcome.SUBMITTED
    assert re.match(r"^PM-20240315-\d{4}$", result.order_reference)
    assert pipeline.state == CheckoutState.SUCCEEDED

    assert len(mock_email_sender.sent) == 1
    message = mock_email_sender.sent[0]
    assert message.to == ["orders-test@procuremarine.com"]
    assert message.reply_to == "jane@shipping.ae"
    assert message.subject == f"New Order Request - {result.order_reference}"
    assert result.order_reference in message.html_body
    assert "Urgent" in message.html_body

@pytest.mark.asyncio
async def test_blank_full_name_fails_validation_without_dispatch(cart, test_settings):
    sender = MockEmailSender()
    sender.send_email = AsyncMock()
    pipeline = _pipeline(sender, test_settings)

    result = await pipeline.submit(
        ContactInfo(full_name="", email="jane@shipping.ae", phone="123"), DELIVERY, cart
    )

    assert result.success is False
    assert result.outcome == SubmissionOutcome.VALIDATION_FAILED
    assert "full_name" in result.errors
    sender.send_email.assert_not_called()
    assert pipeline.state == CheckoutState.FAILED

@pytest.mark.asyncio
async def test_empty_cart_fails_validation(test_settings, mock_email_sender):
    pipeline = _pipeline(mock_email_sender, test_settings)
    result = await pipeline.submit(CONTACT, DELIVERY, Cart())
    assert result.outcome == SubmissionOutcome.VALIDATION_FAILED
    assert "cart" in result.errors
    assert mock_email_sender.sent == []

@pytest.mark.asyncio
async def test_sender_error_result_is_dispatch_failure(cart, test_settings):
    sender = MockEmailSender(result=EmailSendResult(error="Recipients refused: sales@procuremarine.com"))
    result = await _pipeline(sender, test_settings).submit(CONTACT, DELIVERY, cart)

    assert result.success is False
    assert result.outcome == SubmissionOutcome.DISPATCH_FAILED
    assert result.message == DISPATCH_FAILED_MESSAGE
    assert result.order_reference is None

@pytest.mark.asyncio
async def test_sender_exception_is_dispatch_failure(cart, test_settings, failing_email_sender):
    result = await _pipeline(failing_email_sender, test_settings).submit(CONTACT, DELIVERY, cart)
    assert result.outcome == SubmissionOutcome.DISPATCH_FAILED
    assert result.message == DISPATCH_FAILED_MESSAGE

@pytest.mark.asyncio
async def test_dispatch_timeout_is_dispatch_failure(cart, test_settings):
    slow_sender = MockEmailSender(delay=1)
    result = await _pipeline(slow_sender, test_settings).submit(CONTACT, DELIVERY, cart)
    assert result.outcome == SubmissionOutcome.DISPATCH_FAILED

@pytest.mark.asyncio
async def test_any_sender_error_is_dispatch_failure(cart, test_settings):
    sender = MockEmailSender(exception=ConnectionError("mail relay unreachable"))
    pipeline = _pipeline(sender, test_settings)
    result = await pipeline.submit(CONTACT, DELIVERY, cart)
    assert result.outcome == SubmissionOutcome.DISPATCH_FAILED
    assert result.message == DISPATCH_FAILED_MESSAGE
    assert pipeline.state == CheckoutState.FAILED

@pytest.mark.asyncio
async def test_snapshot_error_is_unexpected_failure_not_raised(cart, test_settings, mock_email_sender):
    def broken_clock():
        raise RuntimeError("clock unavailable")

    pipeline = _pipeline(mock_email_sender, test_settings, clock=broken_clock)
    result = await pipeline.submit(CONTACT, DELIVERY, cart)
    assert result.outcome == SubmissionOutcome.UNEXPECTED_FAILURE
    assert result.message == UNEXPECTED_FAILURE_MESSAGE
    assert mock_email_sender.sent == []

@pytest.mark.asyncio
async def test_renderer_failure_is_unexpected_failure(cart, test_settings, mock_email_sender):
    renderer = Mock()
    renderer.render.side_effect = ValueError("bad template")
    result = await _pipeline(mock_email_sender, test_settings, renderer=renderer).submit(CONTACT, DELIVERY, cart)
    assert result.outcome == SubmissionOutcome.UNEXPECTED_FAILURE
    assert mock_email_sender.sent == []

@pytest.mark.asyncio
async def test_failed_attempt_allows_retry(cart, test_settings):
    sender = MockEmailSender(exception=EmailSendingException("SMTP error"))
    pipeline = _pipeline(sender, test_settings)

    first = await pipeline.submit(CONTACT, DELIVERY, cart)
    sender.exception = None
    second = await pipeline.submit(CONTACT, DELIVERY, cart)

    assert first.outcome == SubmissionOutcome.DISPATCH_FAILED
    assert second.success is True
    assert len(sender.sent) == 2

@pytest.mark.asyncio
async def test_success_is_terminal_until_reset(cart, test_settings, mock_email_sender):
    pipeline = _pipeline(mock_email_sender, test_settings)
    await pipeline.submit(CONTACT, DELIVERY, cart)

    again = await pipeline.submit(CONTACT, DELIVERY, cart)
    assert again.outcome == SubmissionOutcome.ALREADY_SUBMITTED
    assert len(mock_email_sender.sent) == 1

    pipeline.reset()
    assert pipeline.state == CheckoutState.IDLE
    third = await pipeline.submit(CONTACT, DELIVERY, cart)
    assert third.success is True
    assert len(mock_email_sender.sent) == 2

@pytest.mark.asyncio
async def test_concurrent_submit_is_refused(cart, test_settings):
    sender = MockEmailSender(delay=0.01)
    pipeline = _pipeline(sender, test_settings)

    first, second = await asyncio.gather(
        pipeline.submit(CONTACT, DELIVERY, cart),
        pipeline.submit(CONTACT, DELIVERY, cart),
    )

    assert first.success is True
    assert second.outcome == SubmissionOutcome.ALREADY_IN_PROGRESS
    assert len(sender.sent) == 1

@pytest.mark.asyncio
async def test_injected_reference_factory(cart, test_settings, mock_email_sender):
    pipeline = _pipeline(mock_email_sender, test_settings, reference_factory=lambda now: "PM-20240315-0042")
    result = await pipeline.submit(CONTACT, DELIVERY, cart)
    assert result.order_reference == "PM-20240315-0042"
