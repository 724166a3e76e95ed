"""
Billing Console
Compute, audit and summarize GST / Non-GST bills

Usage:
    python main.py <draft.json>                   # Compute totals for a draft
    python main.py --audit                        # Audit all saved bills
    python main.py --audit GST/24/0001            # Audit a single bill
    python main.py --summary                      # Billing history summary
"""

import copy
import json
import sys
from pathlib import Path

from loguru import logger

from billing.history import BillingHistory
from billing.tax_calculator import calculate_invoice_totals
from reporting.reporter import InvoiceReporter
from utils.config import DEFAULT_CONFIG, apply_env_overrides, load_config
from utils.data_loaders import BillDataLoader
from utils.data_transformer import to_invoice_draft
from validators.arithmetic_validator import BillArithmeticValidator


class BillingConsole:
    """Main billing console application"""

    def __init__(self, config_path: str = "config.yaml"):
        # Load configuration
        self.config = self._load_config(config_path)
        self._configure_logging()

        self.reporter = InvoiceReporter(self.config, use_color=sys.stdout.isatty())
        self.auditor = BillArithmeticValidator(self.config)
        self.data_dir = self.config['data']['dir']

    def _load_config(self, config_path: str) -> dict:
        """Load configuration"""
        try:
            return load_config(config_path)
        except FileNotFoundError:
            print(f"⚠️  Config file {config_path} not found, using defaults")
            return apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))

    def _configure_logging(self):
        logger.remove()
        logger.add(sys.stderr, level=self.config['logging']['level'])

    def _apply_draft_defaults(self, payload: dict):
        """Fill the seller state and bill type from config when the draft has none"""
        company = payload.get('company')
        company_state = payload.get('companyState') or payload.get('company_state') or (
            company.get('state') if isinstance(company, dict) else None
        )
        if not company_state:
            payload['companyState'] = self.config['company']['state']

        if not (payload.get('billType') or payload.get('bill_type')):
            payload['billType'] = self.config['billing']['default_bill_type']

    def compute_draft(self, draft_path: str):
        """Compute and print totals for a draft JSON file"""

        print("\n🧾 Billing Console - Draft Mode")
        print("=" * 80)

        path = Path(draft_path)
        if not path.exists():
            print(f"❌ Error: {path} not found")
            return None

        try:
            with open(path) as f:
                payload = json.load(f)
            if not isinstance(payload, dict):
                raise ValueError("draft must be a JSON object")

            self._apply_draft_defaults(payload)
            draft = to_invoice_draft(payload)
        except ValueError as e:
            print(f"❌ Invalid draft: {e}")
            return None

        totals = calculate_invoice_totals(draft)
        print(self.reporter.generate_console_report(totals, draft.bill_type))
        return totals

    def audit(self, bill_number: str = None):
        """Audit one or all saved bills"""

        print("\n🔍 Billing Console - Audit Mode")
        print("=" * 80)

        loader = BillDataLoader(self.data_dir)

        if bill_number:
            try:
                bills = [loader.get_bill(bill_number)]
            except ValueError as e:
                print(f"❌ Error: {e}")
                return []
        else:
            bills = loader.bills
            print(f"\n📦 Auditing {len(bills)} bills")

        results = []
        for bill in bills:
            result = self.auditor.validate(bill)
            results.append(result)
            print(self.reporter.generate_audit_report(result))

        failed = len([r for r in results if r.failed_count])
        print("=" * 80)
        print(f"✓ {len(results) - failed} consistent | ✗ {failed} with errors")

        report_dir = Path(self.config['reports']['dir'])
        report_dir.mkdir(parents=True, exist_ok=True)
        report_file = report_dir / "audit_report.json"
        with open(report_file, 'w') as f:
            json.dump([
                json.loads(self.reporter.generate_json_report(bill, result))
                for bill, result in zip(bills, results)
            ], f, indent=2, ensure_ascii=False)
        print(f"\n💾 Audit report saved: {report_file}")

        return results

    def summary(self):
        """Print billing history summary"""

        loader = BillDataLoader(self.data_dir)
        history = BillingHistory(loader.bills)
        summary = history.summary(self.config['audit']['high_value_threshold'])
        print(self.reporter.generate_summary_report(summary))

        overdue = history.overdue()
        if overdue:
            print(f"\n⏰ {len(overdue)} overdue bills:")
            for bill in overdue:
                print(f"   {bill.bill_number:20s} {bill.customer.name:25s} "
                      f"pending ₹{bill.totals.pending_amount:,.2f} (due {bill.due_date})")
        return summary


def main():
    """Main entry point"""

    console = BillingConsole()

    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == '--audit':
            console.audit(sys.argv[2] if len(sys.argv) > 2 else None)
        elif arg == '--summary':
            console.summary()
        elif arg == '--help':
            print(__doc__)
        else:
            # Treat as draft file
            console.compute_draft(arg)
    else:
        print(__doc__)


if __name__ == "__main__":
    main()
