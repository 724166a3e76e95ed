"""
Arithmetic audit of saved bills (Category C)
Recomputes a bill from its inputs and compares the stored figures
"""

from typing import List, Optional

from loguru import logger

from billing.tax_calculator import calculate_invoice_totals
from models.invoice import Bill, InvoiceTotals
from models.validation import CheckResult, CategoryResult, CheckStatus, Severity


class BillArithmeticValidator:
    """
    Category C: Arithmetic & Calculation Audit

    C1: line item figures
    C2: subtotal and discount
    C3: CGST/SGST vs IGST split
    C4: total tax
    C5: final amount and round-off
    C6: paid / pending amounts and payment status
    """

    def __init__(self, config: dict = None):
        self.config = config or {}
        self.tolerance = self.config.get('audit', {}).get('tolerance', 0.01)

    def validate(self, bill: Bill) -> CategoryResult:
        """Execute arithmetic audit checks"""

        expected = calculate_invoice_totals(bill.to_draft())
        stored = bill.totals

        checks = [
            self._check_c1_line_items(stored, expected),
            self._check_c2_subtotal(stored, expected),
            self._check_c3_tax_split(stored, expected),
            self._check_c4_total_tax(stored),
            self._check_c5_final_amount(stored, expected),
            self._check_c6_payments(stored, expected),
        ]

        result = CategoryResult(
            category='C',
            category_name='Arithmetic & Calculation',
            bill_number=bill.bill_number,
            checks=checks
        )

        if result.failed_count:
            logger.warning("Bill {} failed {} arithmetic checks", bill.bill_number, result.failed_count)
        return result

    def _close(self, a: float, b: float) -> bool:
        return abs(a - b) <= self.tolerance

    def _mismatch(self, label: str, expected: float, actual: float) -> Optional[str]:
        if self._close(expected, actual):
            return None
        return f"{label}: expected ₹{expected:.2f}, got ₹{actual:.2f}"

    def _result(self, check_id: str, name: str, errors: List[str], ok_reasoning: str,
                severity: Severity, expected: float = None, actual: float = None) -> CheckResult:
        if not errors:
            return CheckResult(
                check_id=check_id,
                check_name=name,
                status=CheckStatus.PASS,
                reasoning=ok_reasoning,
                severity=Severity.MEDIUM,
                expected=expected,
                actual=actual
            )
        return CheckResult(
            check_id=check_id,
            check_name=name,
            status=CheckStatus.FAIL,
            reasoning='; '.join(errors),
            severity=severity,
            expected=expected,
            actual=actual
        )

    def _check_c1_line_items(self, stored: InvoiceTotals, expected: InvoiceTotals) -> CheckResult:
        """C1: stored line breakdowns match recomputation"""

        if not stored.line_items:
            return CheckResult(
                check_id='C1',
                check_name='Line Item Calculation',
                status=CheckStatus.SKIPPED,
                reasoning='No stored line item breakdown',
                severity=Severity.LOW
            )

        errors = []
        if len(stored.line_items) != len(expected.line_items):
            errors.append(
                f"Expected {len(expected.line_items)} line items, got {len(stored.line_items)}"
            )
        else:
            for idx, (s, e) in enumerate(zip(stored.line_items, expected.line_items), 1):
                for label, exp, act in [
                    ('taxable', e.taxable_amount, s.taxable_amount),
                    ('GST', e.gst_amount, s.gst_amount),
                    ('total', e.total_amount, s.total_amount),
                ]:
                    msg = self._mismatch(f"Line {idx} {label}", exp, act)
                    if msg:
                        errors.append(msg)

        return self._result('C1', 'Line Item Calculation', errors,
                            'All line items calculated correctly', Severity.HIGH)

    def _check_c2_subtotal(self, stored: InvoiceTotals, expected: InvoiceTotals) -> CheckResult:
        """C2: subtotal, discount and taxable amount"""

        errors = [m for m in [
            self._mismatch('Subtotal', expected.subtotal, stored.subtotal),
            self._mismatch('Discount', expected.discount_amount, stored.discount_amount),
            self._mismatch('Taxable amount', expected.taxable_amount, stored.taxable_amount),
        ] if m]

        return self._result('C2', 'Subtotal & Discount', errors,
                            f'Subtotal ₹{stored.subtotal:.2f} matches line items',
                            Severity.HIGH, expected.subtotal, stored.subtotal)

    def _check_c3_tax_split(self, stored: InvoiceTotals, expected: InvoiceTotals) -> CheckResult:
        """C3: CGST/SGST for intra-state, IGST for inter-state"""

        errors = [m for m in [
            self._mismatch('CGST', expected.cgst_total, stored.cgst_total),
            self._mismatch('SGST', expected.sgst_total, stored.sgst_total),
            self._mismatch('IGST', expected.igst_total, stored.igst_total),
        ] if m]

        kind = 'IGST (inter-state)' if expected.is_inter_state else 'CGST + SGST (intra-state)'
        return self._result('C3', 'Tax Split', errors, f'Tax correctly charged as {kind}',
                            Severity.CRITICAL)

    def _check_c4_total_tax(self, stored: InvoiceTotals) -> CheckResult:
        """C4: total tax = CGST + SGST + IGST"""

        calculated = stored.cgst_total + stored.sgst_total + stored.igst_total
        errors = [m for m in [self._mismatch('Total tax', calculated, stored.total_tax)] if m]

        return self._result('C4', 'Total Tax', errors,
                            f'Total tax ₹{stored.total_tax:.2f} calculated correctly',
                            Severity.CRITICAL, calculated, stored.total_tax)

    def _check_c5_final_amount(self, stored: InvoiceTotals, expected: InvoiceTotals) -> CheckResult:
        """C5: final amount is whole rupees and round-off is consistent"""

        errors = []
        if not float(stored.final_amount).is_integer():
            errors.append(f"Final amount ₹{stored.final_amount:.2f} is not rounded")

        raw_total = stored.taxable_amount + stored.total_tax
        msg = self._mismatch('Round-off', stored.final_amount - raw_total, stored.round_off_amount)
        if msg:
            errors.append(msg)

        msg = self._mismatch('Final amount', expected.final_amount, stored.final_amount)
        if msg:
            errors.append(msg)

        return self._result('C5', 'Final Amount', errors,
                            f'Final amount ₹{stored.final_amount:.2f} calculated correctly',
                            Severity.CRITICAL, expected.final_amount, stored.final_amount)

    def _check_c6_payments(self, stored: InvoiceTotals, expected: InvoiceTotals) -> CheckResult:
        """C6: paid = sum(payments), pending = final - paid, status derived"""

        errors = [m for m in [
            self._mismatch('Paid amount', expected.paid_amount, stored.paid_amount),
            self._mismatch('Pending amount', stored.final_amount - stored.paid_amount, stored.pending_amount),
        ] if m]

        if stored.payment_status != expected.payment_status:
            errors.append(
                f"Payment status: expected {expected.payment_status.value}, "
                f"got {stored.payment_status.value}"
            )

        if stored.pending_amount < 0:
            return CheckResult(
                check_id='C6',
                check_name='Payments',
                status=CheckStatus.WARNING if not errors else CheckStatus.FAIL,
                reasoning='; '.join(errors + [f"Over-paid by ₹{-stored.pending_amount:.2f}"]),
                severity=Severity.MEDIUM
            )

        return self._result('C6', 'Payments', errors,
                            f'Payment status {stored.payment_status.value} is consistent',
                            Severity.HIGH, expected.paid_amount, stored.paid_amount)
