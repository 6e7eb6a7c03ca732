# Overview: Payments against debt transactions; append-only payment log.

"""
Payment logging.

WHY: a debt sale is settled over time. Every payment is appended to
payment_logs and moves paid_amount on its transaction in the same unit of
work. paid_amount never exceeds total_amount: a payment larger than what is
still owed is rejected, not capped.
"""

from ..errors import ValidationError
from ..extensions import db
from ..models import PaymentLog, Transaction
from ..store import unit_of_work
from offline_stock.time_utils import utcnow
from .sales_service import PAYMENT_DEBT, PAYMENT_FULLY_PAID, get_transaction


def outstanding(transaction: Transaction) -> float:
    """What is still owed; never negative."""
    return transaction.outstanding


def _parse_amount(raw) -> float:
    try:
        amount = round(float(raw), 2)
    except (TypeError, ValueError):
        raise ValidationError("Payment amount must be a number", details={"amount": raw})
    if amount <= 0:
        raise ValidationError("Payment amount must be positive", details={"amount": raw})
    return amount


def log_payment(transaction_id: int, amount, note: str | None = None) -> PaymentLog:
    """
    Apply a payment to a transaction.

    Raises NotFoundError for an unknown transaction and ValidationError when
    the amount is not positive, nothing is owed, or it exceeds what is owed.
    """
    amount = _parse_amount(amount)

    with unit_of_work():
        transaction = get_transaction(transaction_id)
        owed = outstanding(transaction)
        if owed <= 0:
            raise ValidationError(
                "Transaction is already fully paid",
                details={"transaction_id": transaction_id},
            )
        if amount > owed:
            raise ValidationError(
                "Payment exceeds outstanding amount",
                details={"transaction_id": transaction_id, "amount": amount, "outstanding": owed},
            )

        transaction.paid_amount = round((transaction.paid_amount or 0) + amount, 2)
        transaction.payment_status = PAYMENT_DEBT if outstanding(transaction) > 0 else PAYMENT_FULLY_PAID

        log = PaymentLog(
            transaction_id=transaction.id,
            amount=amount,
            note=(note or "").strip() or None,
            created_at=utcnow(),
        )
        db.session.add(log)

    return log


def list_payment_logs(transaction_id: int | None = None) -> list[PaymentLog]:
    """Newest first."""
    query = db.session.query(PaymentLog)
    if transaction_id is not None:
        query = query.filter(PaymentLog.transaction_id == transaction_id)
    return query.order_by(PaymentLog.created_at.desc(), PaymentLog.id.desc()).all()
