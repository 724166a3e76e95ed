"""
Invoice Reporter
Renders totals, audit results and history summaries for the console and JSON
"""

import json
from datetime import datetime
from typing import Dict, Optional

from models.invoice import Bill, BillType, InvoiceTotals
from models.validation import CategoryResult, CheckStatus


class InvoiceReporter:
    """
    Invoice Reporter

    Generates reports in various formats:
    - Console (colored text)
    - JSON (machine readable)
    - Summary (billing history)
    """

    def __init__(self, config: dict = None, use_color: bool = True):
        self.config = config or {}

        # ANSI color codes
        self.colors = {
            'green': '\033[92m',
            'red': '\033[91m',
            'yellow': '\033[93m',
            'blue': '\033[94m',
            'gray': '\033[90m',
            'bold': '\033[1m',
            'reset': '\033[0m'
        }
        if not use_color:
            self.colors = {k: '' for k in self.colors}

    def _high_value_threshold(self) -> float:
        return self.config.get('audit', {}).get('high_value_threshold', 1000000)

    def _money(self, label: str, amount: float, width: int = 28) -> str:
        return f"  {label:<{width}} ₹{amount:>14,.2f}"

    def generate_console_report(
        self,
        totals: InvoiceTotals,
        bill_type: BillType = BillType.GST,
        bill: Optional[Bill] = None
    ) -> str:
        """Generate invoice breakdown with colors"""

        c = self.colors
        lines = []

        # Header
        lines.append("=" * 80)
        title = f"{bill_type.value.upper()} INVOICE"
        lines.append(f"{c['bold']}{title}{c['reset']}")
        lines.append("=" * 80)

        if bill is not None:
            lines.append(f"  Invoice No: {bill.bill_number}")
            lines.append(f"  Date: {bill.bill_date}")
            lines.append(f"  Financial Year: {bill.financial_year}")
            lines.append(f"  Customer: {bill.customer.name} ({bill.customer.state})")
            lines.append(f"  Seller: {bill.company.name} ({bill.company.state})")
        lines.append("")

        # Items
        lines.append(f"{c['bold']}Items:{c['reset']}")
        for idx, item in enumerate(totals.line_items, 1):
            lines.append(
                f"  {idx:>2}. {item.product_name[:30]:<30} "
                f"{item.quantity:>6g} x ₹{item.rate:>11,.2f}  "
                f"GST {item.gst_rate:>5g}%  ₹{item.total_amount:>13,.2f}"
            )
        lines.append("")

        # Totals
        lines.append(self._money("Subtotal", totals.subtotal))
        if totals.discount_amount:
            lines.append(self._money("Discount", -totals.discount_amount))
        lines.append(self._money("Taxable Amount", totals.taxable_amount))

        if bill_type == BillType.GST:
            if totals.is_inter_state:
                lines.append(self._money("IGST", totals.igst_total))
            else:
                lines.append(self._money("CGST", totals.cgst_total))
                lines.append(self._money("SGST", totals.sgst_total))
            lines.append(self._money("Total Tax", totals.total_tax))

        if totals.round_off_amount:
            lines.append(self._money("Round Off", totals.round_off_amount))
        lines.append(f"{c['bold']}{self._money('Final Amount', totals.final_amount)}{c['reset']}")
        lines.append("")

        # Payment status
        status_color = self._get_status_color(totals.payment_status.value)
        lines.append(f"  Paid: ₹{totals.paid_amount:,.2f} | Pending: ₹{totals.pending_amount:,.2f} | "
                     f"Status: {status_color}{totals.payment_status.value}{c['reset']}")

        lines.append("=" * 80)
        return "\n".join(lines)

    def generate_audit_report(self, result: CategoryResult) -> str:
        """Console report for an arithmetic audit"""

        c = self.colors
        lines = []

        lines.append("-" * 80)
        lines.append(f"{c['bold']}Audit {result.bill_number or ''}: {result.category_name}{c['reset']}")
        lines.append("-" * 80)
        lines.append(f"  Summary: {result.passed_count} passed, {result.failed_count} failed, "
                     f"{result.warning_count} warnings")
        lines.append("")

        for check in result.checks:
            symbol = self._get_status_symbol(check.status)
            color = self._get_status_color(check.status.value)
            lines.append(f"  {color}{symbol} {check.check_id}: {check.check_name}{c['reset']}")

            # Truncate long reasoning
            reasoning = check.reasoning
            if len(reasoning) > 100:
                reasoning = reasoning[:97] + "..."
            lines.append(f"    {reasoning}")

        critical = result.get_critical_issues()
        if critical:
            lines.append("")
            lines.append(f"{c['red']}{c['bold']}CRITICAL ISSUES ({len(critical)}){c['reset']}")
            for issue in critical:
                lines.append(f"  • {issue.check_id}: {issue.check_name}")

        return "\n".join(lines)

    def generate_json_report(self, bill: Bill, audit: Optional[CategoryResult] = None) -> str:
        """Generate JSON report"""

        report = {
            'bill': {
                'number': bill.bill_number,
                'type': bill.bill_type.value,
                'date': str(bill.bill_date),
                'customer': bill.customer.name,
                'customer_state': bill.customer.state,
                'company_state': bill.company.state,
                'high_value': bill.is_high_value(self._high_value_threshold()),
            },
            'totals': bill.totals.model_dump(mode='json', exclude={'line_items'}),
        }

        if audit is not None:
            report['audit'] = {
                'status': audit.overall_status,
                'passed': audit.passed_count,
                'failed': audit.failed_count,
                'warnings': audit.warning_count,
                'checks': [
                    {
                        'id': check.check_id,
                        'name': check.check_name,
                        'status': check.status.value,
                        'severity': check.severity.value,
                        'reasoning': check.reasoning
                    }
                    for check in audit.checks
                ]
            }

        return json.dumps(report, indent=2, ensure_ascii=False)

    def generate_summary_report(self, summary: Dict) -> str:
        """Billing history summary"""

        lines = []

        lines.append("=" * 80)
        lines.append(f"{self.colors['bold']}BILLING SUMMARY{self.colors['reset']}")
        lines.append("=" * 80)
        lines.append(f"  Total Bills: {summary['total_bills']}")
        lines.append(self._money("Revenue", summary['total_revenue']))
        lines.append(self._money("Tax Collected", summary['total_tax']))
        lines.append(self._money("Amount Received", summary['collected']))
        lines.append(self._money("Amount Pending", summary['pending']))
        if summary.get('high_value_bills'):
            lines.append(f"  High value bills: {summary['high_value_bills']}")
        lines.append("")
        lines.append("  By bill type: " + ", ".join(
            f"{k}: {v}" for k, v in summary['by_bill_type'].items()))
        lines.append("  By payment status: " + ", ".join(
            f"{k}: {v}" for k, v in summary['by_payment_status'].items()))
        lines.append("=" * 80)
        lines.append(f"Report generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

        return "\n".join(lines)

    def _get_status_symbol(self, status: CheckStatus) -> str:
        """Get symbol for status"""
        symbols = {
            CheckStatus.PASS: '✓',
            CheckStatus.FAIL: '✗',
            CheckStatus.WARNING: '⚠',
            CheckStatus.SKIPPED: '○'
        }
        return symbols.get(status, '?')

    def _get_status_color(self, status: str) -> str:
        """Get color for status"""
        if status in ['PASS', 'Paid']:
            return self.colors['green']
        elif status in ['FAIL', 'Pending']:
            return self.colors['red']
        elif status in ['WARNING', 'Partial']:
            return self.colors['yellow']
        else:
            return self.colors['gray']
