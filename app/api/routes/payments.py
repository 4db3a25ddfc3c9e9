from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.serializers import payment_out
from app.core.utils import success_response
from app.db.session import get_db
from app.services.payment_service import reconcile_payment

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/{payment_id}/airport-pickups/success")
def payment_success(payment_id: str,
                    transaction_token: str | None = Query(default=None, alias="TransactionToken"),
                    company_ref: str | None = Query(default=None, alias="CompanyRef"),
                    db: Session = Depends(get_db)):
    payment = reconcile_payment(db, payment_id, transaction_token, company_ref)
    return success_response(f"Payment {payment.status}", payment_out(payment))


@router.get("/{payment_id}/airport-pickups/failure")
def payment_failure(payment_id: str,
                    transaction_token: str | None = Query(default=None, alias="TransactionToken"),
                    company_ref: str | None = Query(default=None, alias="CompanyRef"),
                    db: Session = Depends(get_db)):
    # The payer came back without completing; the gateway still decides the outcome.
    payment = reconcile_payment(db, payment_id, transaction_token, company_ref)
    return success_response(f"Payment {payment.status}", payment_out(payment))
