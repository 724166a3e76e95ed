"""
Billing history filters and summary
"""

import pytest
from datetime import date
from pathlib import Path

from billing.history import BillingHistory, is_overdue
from models.invoice import BillStatus
from utils.data_loaders import BillDataLoader


DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class TestBillingHistory:

    @pytest.fixture
    def history(self):
        return BillingHistory(BillDataLoader(str(DATA_DIR)).bills)

    def test_summary(self, history):
        summary = history.summary()

        assert summary['total_bills'] == 3
        assert summary['total_revenue'] == pytest.approx(272398)
        assert summary['collected'] == pytest.approx(217999)
        assert summary['pending'] == pytest.approx(54399)
        assert summary['by_bill_type'] == {'GST': 2, 'Non-GST': 1, 'Quotation': 0}
        assert summary['by_payment_status'] == {'Paid': 1, 'Partial': 1, 'Pending': 1}

    def test_cancelled_bills_excluded_from_revenue(self, history):
        history.bills[0].status = BillStatus.CANCELLED
        summary = BillingHistory(history.bills).summary()

        assert summary['total_bills'] == 3
        assert summary['total_revenue'] == pytest.approx(272398 - history.bills[0].totals.final_amount)

    def test_filters(self, history):
        assert len(history.filter(bill_type="GST")) == 2
        assert len(history.filter(payment_status="Paid")) == 1
        assert len(history.filter(search="sarah")) == 1
        assert len(history.filter(search="NGST")) == 1
        assert len(history.filter(start_date=date(2024, 9, 16))) == 2
        assert len(history.filter(start_date=date(2024, 9, 16), end_date=date(2024, 9, 16))) == 1
        assert len(history.filter(customer_id="1")) == 1
        assert len(history.filter(bill_type="GST", payment_status="Pending")) == 0

    def test_overdue(self, history):
        overdue = history.overdue(today=date(2024, 10, 5))

        assert [b.bill_number for b in overdue] == ["NGST/24/0001"]
        assert history.overdue(today=date(2024, 9, 20)) == []

    def test_paid_bill_is_never_overdue(self, history):
        bill = history.filter(payment_status="Paid").bills[0]
        bill.due_date = date(2024, 9, 1)

        assert is_overdue(bill, today=date(2024, 10, 5)) is False

    def test_page(self, history):
        first = history.page(1, limit=2)

        assert first['total'] == 3
        assert first['total_pages'] == 2
        assert first['has_next'] is True
        assert first['has_prev'] is False
        assert [b.bill_number for b in first['bills']] == ["NGST/24/0001", "GST/24/0002"]
        assert [b.bill_number for b in history.page(2, limit=2)['bills']] == ["GST/24/0001"]

    def test_page_rejects_non_positive_arguments(self, history):
        with pytest.raises(ValueError):
            history.page(1, limit=0)
        with pytest.raises(ValueError):
            history.page(0, limit=2)
        with pytest.raises(ValueError):
            BillingHistory([]).page(-1)

    def test_high_value_bills(self, history):
        assert history.summary()['high_value_bills'] == 0
        assert history.summary(high_value_threshold=150000)['high_value_bills'] == 1
        assert history.summary(high_value_threshold=500)['high_value_bills'] == 3

    def test_sales_by_day(self, history):
        daily = history.sales_by_day()

        assert len(daily) == 3
        assert daily['sales'].sum() == pytest.approx(272398)

    def test_empty_history(self):
        history = BillingHistory([])

        assert history.summary()['total_bills'] == 0
        assert history.summary()['total_revenue'] == 0
        assert history.sales_by_day().empty
        assert history.page()['bills'] == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
