from datetime import date
from decimal import Decimal

from clubify.club.models import PaymentStatus


def status_for_amount(amount_paid: Decimal, amount_due: Decimal) -> PaymentStatus:
    """Status written when a payment is recorded"""
    if amount_paid >= amount_due:
        return PaymentStatus.paid
    if amount_paid > 0:
        return PaymentStatus.partial
    return PaymentStatus.unpaid


def is_overdue(status: str, due_date: date, today: date) -> bool:
    """An unpaid record whose due date has passed reads as overdue"""
    return status == PaymentStatus.unpaid.value and due_date < today
