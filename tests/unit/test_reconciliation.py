"""Unit tests for the balance check and save gate"""

from decimal import Decimal
from billboard_billing.domain.models import BalanceStatus, Installment
from billboard_billing.domain.reconciliation import check_save_eligibility, reconcile


def test_reconcile_balanced(balanced_installments):
    report = reconcile(balanced_installments, 1000)

    assert report.total_installments == Decimal("1000")
    assert report.difference == 0
    assert report.is_balanced is True
    assert report.status == BalanceStatus.BALANCED


def test_reconcile_deficit(balanced_installments):
    """Test installments short of the total"""
    report = reconcile(balanced_installments[:2], 1000)

    assert report.difference == Decimal("400")
    assert report.is_balanced is False
    assert report.status == BalanceStatus.DEFICIT


def test_reconcile_surplus(balanced_installments):
    """Test installments exceeding the total"""
    report = reconcile(balanced_installments, 650)

    assert report.difference == Decimal("-350")
    assert report.status == BalanceStatus.SURPLUS


def test_reconcile_tolerates_sub_unit_drift():
    report = reconcile([Installment(amount=Decimal("999.50"))], 1000)

    assert report.is_balanced is True
    assert report.difference == Decimal("0.50")


def test_reconcile_one_unit_is_unbalanced():
    assert reconcile([Installment(amount=Decimal("999"))], 1000).is_balanced is False


def test_reconcile_custom_tolerance():
    report = reconcile([Installment(amount=Decimal("999.50"))], 1000, tolerance=Decimal("0.01"))

    assert report.is_balanced is False


def test_reconcile_is_idempotent(balanced_installments):
    """Test repeated calls yield identical results and leave inputs untouched"""
    snapshot = list(balanced_installments)

    assert reconcile(balanced_installments, 1200) == reconcile(balanced_installments, 1200)
    assert balanced_installments == snapshot


def test_reconcile_zero_total_empty_set():
    assert reconcile([], 0).is_balanced is True


def test_save_gate_rejects_empty_set():
    check = check_save_eligibility([], 0)

    assert check.is_valid is False
    assert "At least one installment" in check.message


def test_save_gate_rejects_unbalanced(balanced_installments):
    check = check_save_eligibility(balanced_installments, 1500)

    assert check.is_valid is False
    assert check.report.difference == Decimal("500")


def test_save_gate_accepts_balanced(balanced_installments):
    check = check_save_eligibility(balanced_installments, 1000)

    assert check.is_valid is True
    assert check.message == ""
