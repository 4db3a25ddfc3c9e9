import logging
import threading
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    PaymentGatewayRejected,
    PaymentGatewayTimeout,
    ValidationError,
)
from app.models.booking import AirportPickupBooking
from app.models.payment import AirportPickupBookingPayment
from app.services.audit_service import log_audit
from app.services.dpo_client import DpoClient, DpoConfig

logger = logging.getLogger(__name__)

# Process-wide cap on in-flight gateway calls.
GATEWAY_SLOTS = threading.BoundedSemaphore(settings.DPO_MAX_CONCURRENCY)


@dataclass
class PaymentTokenResult:
    token: str | None
    error: str | None = None


def _dpo_client() -> DpoClient:
    return DpoClient(
        DpoConfig(
            api_url=settings.DPO_API_URL,
            company_token=settings.COMPANY_TOKEN,
            service_type=settings.DPO_SERVICE_TYPE,
            ptl=settings.DPO_PTL,
            timeout=settings.DPO_TIMEOUT_SECONDS,
            max_retries=settings.DPO_MAX_RETRIES,
        ),
        slots=GATEWAY_SLOTS,
    )


def callback_urls(payment_id: str) -> tuple[str, str]:
    base = f"{settings.PUBLIC_API_URL}/payments/{payment_id}/airport-pickups"
    return f"{base}/success", f"{base}/failure"


def request_payment_token(db: Session, booking: AirportPickupBooking,
                          payment: AirportPickupBookingPayment) -> PaymentTokenResult:
    """Ask the gateway for a hosted-page token for an already committed booking.

    Gateway failures never propagate: the booking stands and the caller gets
    ``token=None`` with a client-safe error message.
    """
    booking_id, payment_id = booking.id, payment.id
    request = dict(
        amount=payment.amount,
        currency=payment.currency,
        company_ref=payment_id,
        service_description=f"Airport pickup from {booking.airport.name}",
        service_date=booking.created_at,
    )
    # No transaction may stay open (and hold a pooled connection) across the gateway call.
    db.commit()

    redirect_url, back_url = callback_urls(payment_id)
    try:
        token = _dpo_client().create_token(redirect_url=redirect_url, back_url=back_url, **request)
    except PaymentGatewayTimeout as e:
        # Outcome unknown on the gateway side: keep the payment pending.
        log_audit(db, f"Payment token request timed out for booking {booking_id}",
                  affected_resource_id=payment_id, affected_resource_type="AirportPickupBookingPayment")
        db.commit()
        return PaymentTokenResult(token=None, error=e.message)
    except PaymentGatewayRejected as e:
        payment.status = "failed"
        log_audit(db, f"Payment token request rejected for booking {booking_id} ({e.result_code})",
                  affected_resource_id=payment_id, affected_resource_type="AirportPickupBookingPayment")
        db.commit()
        return PaymentTokenResult(token=None, error=e.explanation or e.message)
    except ExternalServiceError as e:
        log_audit(db, f"Payment token request failed for booking {booking_id}",
                  affected_resource_id=payment_id, affected_resource_type="AirportPickupBookingPayment")
        db.commit()
        return PaymentTokenResult(token=None, error=e.message)

    payment.transaction_token = token
    log_audit(db, f"Payment token issued for booking {booking_id}",
              affected_resource_id=payment_id, affected_resource_type="AirportPickupBookingPayment")
    db.commit()
    logger.info("payment token issued payment=%s booking=%s", payment_id, booking_id)
    return PaymentTokenResult(token=token)


def payment_for_update(payment_id: str):
    """Row-locking select so concurrent callback redeliveries settle a payment once."""
    return (
        select(AirportPickupBookingPayment)
        .where(AirportPickupBookingPayment.id == payment_id)
        .with_for_update()
    )


def reconcile_payment(db: Session, payment_id: str, transaction_token: str | None,
                      company_ref: str | None = None) -> AirportPickupBookingPayment:
    """Settle a payment from a gateway redirect, re-checking the token server-side."""
    payment = db.execute(payment_for_update(payment_id)).scalar_one_or_none()
    if not payment:
        raise NotFoundError("Payment not found")
    if company_ref is not None and company_ref != payment.id:
        raise ValidationError("Payment reference mismatch")
    if not transaction_token or transaction_token != payment.transaction_token:
        raise ValidationError("Transaction token mismatch")

    # idempotent; commit releases the row lock
    if payment.status in ("confirmed", "failed"):
        db.commit()
        return payment

    try:
        result = _dpo_client().verify_token(transaction_token)
    except ExternalServiceError as e:
        logger.warning("verifyToken failed for payment %s, leaving it pending: %s", payment.id, e.message)
        db.commit()
        return payment

    if result.paid:
        payment.status = "confirmed"
        payment.gateway_reference = result.approval or result.trans_ref or transaction_token
        description = f"Payment confirmed for booking {payment.booking_id}"
    elif result.pending:
        db.commit()
        return payment
    else:
        payment.status = "failed"
        description = f"Payment failed for booking {payment.booking_id} ({result.result_code}: {result.explanation})"

    log_audit(db, description, affected_resource_id=payment.id, affected_resource_type="AirportPickupBookingPayment")
    db.commit()
    db.refresh(payment)
    logger.info("payment %s reconciled as %s", payment.id, payment.status)
    return payment
