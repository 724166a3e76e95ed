"""
Bill editor tests: every mutation leaves the totals recalculated

Run with: pytest tests/test_bill_editor.py -v
"""

import copy
import pytest
from datetime import date

from billing.bill_editor import BillEditor
from billing.exceptions import DraftValidationError, ItemNotFoundError, PaymentRejectedError
from models.invoice import (
    BillStatus,
    BillType,
    CompanyProfile,
    Customer,
    LineItemInput,
    PaymentInput,
    PaymentStatus,
    Product,
)
from utils.config import DEFAULT_CONFIG


@pytest.fixture
def company():
    return CompanyProfile(
        name="ElectroMart Pvt Ltd",
        state="Karnataka",
        state_code="29",
        gst_number="29ABCDE1234F1Z5",
    )


@pytest.fixture
def local_customer():
    return Customer(customer_id="1", name="John Doe", phone="+91 9876543210", state="Karnataka")


@pytest.fixture
def delhi_customer():
    return Customer(customer_id="2", name="Sarah Smith", phone="+91 9876543211", state="Delhi")


@pytest.fixture
def iphone():
    return Product(product_id="1", name="iPhone 15 Pro", price=129999, gst_rate=18, hsn_code="8517")


@pytest.fixture
def editor(company, local_customer):
    return BillEditor(company, customer=local_customer, financial_year="2024-25")


class TestBillEditorItems:
    """Items and header changes"""

    def test_new_editor_has_zero_totals(self, editor):
        assert editor.totals.subtotal == 0
        assert editor.totals.final_amount == 0

    def test_add_product_recalculates(self, editor, iphone):
        item = editor.add_product(iphone)

        assert item.item_id
        assert item.rate == 129999
        assert item.hsn_code == "8517"
        assert editor.totals.final_amount == 153399
        assert editor.totals.cgst_total == pytest.approx(11699.91)

    def test_custom_rate_overrides_price(self, editor, iphone):
        editor.add_product(iphone, quantity=2, rate=120000, discount_percent=5)

        assert editor.totals.subtotal == pytest.approx(228000)

    def test_remove_item(self, editor, iphone):
        item = editor.add_product(iphone)
        editor.remove_item(item.item_id)

        assert editor.items == []
        assert editor.totals.final_amount == 0

    def test_remove_unknown_item(self, editor):
        with pytest.raises(ItemNotFoundError):
            editor.remove_item("missing")

    def test_update_quantity(self, editor, iphone):
        item = editor.add_product(iphone)
        totals = editor.update_item_quantity(item.item_id, 2)

        assert totals.subtotal == pytest.approx(259998)
        assert editor.items[0].quantity == 2

    def test_customer_state_change_switches_tax(self, editor, iphone, delhi_customer):
        editor.add_product(iphone)
        assert editor.totals.igst_total == 0

        editor.set_customer(delhi_customer)

        assert editor.totals.is_inter_state is True
        assert editor.totals.cgst_total == 0
        assert editor.totals.igst_total == pytest.approx(23399.82)
        assert editor.totals.final_amount == 153399

    def test_discount_change(self, editor, iphone):
        editor.add_product(iphone)
        editor.set_discount(10)

        assert editor.totals.discount_amount == pytest.approx(12999.9)
        assert editor.totals.taxable_amount == pytest.approx(116999.1)

    def test_bill_type_change_drops_tax(self, editor, iphone):
        editor.add_product(iphone)
        editor.set_bill_type("Non-GST")

        assert editor.bill_type == BillType.NON_GST
        assert editor.totals.total_tax == 0
        assert editor.totals.final_amount == 129999


class TestBillEditorPayments:
    """Payment guard"""

    @pytest.fixture
    def priced_editor(self, editor):
        editor.add_item(LineItemInput(product_name="USB-C Cable 1m", quantity=2, rate=500, gst_rate=18))
        return editor

    def test_partial_then_full_payment(self, priced_editor):
        assert priced_editor.totals.final_amount == 1180

        priced_editor.add_payment(PaymentInput(method="Cash", amount=500))
        assert priced_editor.totals.payment_status == PaymentStatus.PARTIAL
        assert priced_editor.totals.pending_amount == 680

        priced_editor.add_payment(PaymentInput(method="UPI", amount=680))
        assert priced_editor.totals.payment_status == PaymentStatus.PAID
        assert priced_editor.totals.pending_amount == 0

    def test_rejects_over_payment(self, priced_editor):
        with pytest.raises(PaymentRejectedError) as exc:
            priced_editor.add_payment(PaymentInput(method="Card", amount=2000))

        assert exc.value.pending_amount == 1180
        assert priced_editor.payments == []

    def test_rejects_zero_payment(self, priced_editor):
        with pytest.raises(PaymentRejectedError):
            priced_editor.add_payment(PaymentInput(method="Cash", amount=0))

    def test_remove_payment(self, priced_editor):
        payment = priced_editor.add_payment(PaymentInput(method="Cash", amount=500))
        priced_editor.remove_payment(payment.payment_id)

        assert priced_editor.totals.paid_amount == 0
        assert priced_editor.totals.payment_status == PaymentStatus.PENDING

    def test_remove_unknown_payment(self, priced_editor):
        with pytest.raises(ItemNotFoundError):
            priced_editor.remove_payment("nope")


class TestBillEditorSave:
    """Saving a draft"""

    def test_save_assigns_number(self, editor, iphone):
        editor.add_product(iphone)

        bill = editor.save(sequence=7, bill_date=date(2024, 9, 15))

        assert bill.bill_number == "GST/24/0007"
        assert bill.bill_date == date(2024, 9, 15)
        assert bill.totals.final_amount == 153399
        assert bill.customer.name == "John Doe"

    def test_save_keeps_existing_number(self, editor, iphone):
        editor.add_product(iphone)
        first = editor.save(sequence=1)
        second = editor.save(sequence=5)

        assert first.bill_number == second.bill_number == "GST/24/0001"
        assert first.bill_id == second.bill_id

    def test_save_quotation_prefix(self, company, local_customer, iphone):
        editor = BillEditor(company, bill_type="Quotation", customer=local_customer,
                            financial_year="2025-26")
        editor.add_product(iphone)

        assert editor.save(sequence=3).bill_number == "QUO/25/0003"

    def test_save_without_customer(self, company, iphone):
        editor = BillEditor(company, financial_year="2024-25")
        editor.add_product(iphone)

        with pytest.raises(DraftValidationError) as exc:
            editor.save()

        assert any("customer" in err.lower() for err in exc.value.errors)

    def test_save_without_items(self, editor):
        with pytest.raises(DraftValidationError) as exc:
            editor.save()

        assert any("at least one item" in err for err in exc.value.errors)

    def test_reopen_saved_bill(self, editor, iphone, delhi_customer):
        editor.add_product(iphone)
        bill = editor.save()

        reopened = BillEditor.from_bill(bill)
        reopened.set_customer(delhi_customer)

        assert reopened.bill_number == bill.bill_number
        assert reopened.totals.igst_total == pytest.approx(23399.82)
        assert bill.totals.igst_total == 0

    def test_resave_keeps_saved_header(self, editor, iphone):
        editor.add_product(iphone)
        bill = editor.save(
            bill_date=date(2024, 9, 15), due_date=date(2024, 10, 15), status=BillStatus.SENT,
            notes="deliver friday", terms="Net 30", created_by="clerk",
        )

        resaved = BillEditor.from_bill(bill).save()

        assert resaved.bill_date == date(2024, 9, 15)
        assert resaved.due_date == date(2024, 10, 15)
        assert resaved.status == BillStatus.SENT
        assert resaved.notes == "deliver friday"
        assert resaved.terms == "Net 30"
        assert resaved.created_by == "clerk"
        assert resaved.created_at == bill.created_at
        assert resaved.updated_at >= bill.updated_at

    def test_resave_overrides_given_fields(self, editor, iphone):
        editor.add_product(iphone)
        bill = editor.save(due_date=date(2024, 10, 15), status=BillStatus.SENT)

        resaved = BillEditor.from_bill(bill).save(status=BillStatus.PAID)

        assert resaved.status == BillStatus.PAID
        assert resaved.due_date == date(2024, 10, 15)

    def test_type_change_renumbers(self, editor, iphone):
        editor.add_product(iphone)
        bill = editor.save(sequence=1)

        reopened = BillEditor.from_bill(bill)
        reopened.set_bill_type("Quotation")
        quote = reopened.save(sequence=4)

        assert quote.bill_type == BillType.QUOTATION
        assert quote.bill_number == "QUO/24/0004"
        assert quote.bill_id == bill.bill_id

    def test_reopened_bill_uses_configured_prefixes(self, company, local_customer, iphone):
        prefixes = {"GST": "TAX", "Non-GST": "RET", "Quotation": "EST"}
        editor = BillEditor(company, customer=local_customer, financial_year="2024-25", prefixes=prefixes)
        editor.add_product(iphone)
        bill = editor.save(sequence=2)
        assert bill.bill_number == "TAX/24/0002"

        reopened = BillEditor.from_bill(bill, prefixes=prefixes)
        assert reopened.save().bill_number == "TAX/24/0002"

        reopened.set_bill_type("Non-GST")
        assert reopened.save(sequence=9).bill_number == "RET/24/0009"


class TestBillEditorFromConfig:
    """Editor wired from the application config"""

    @pytest.fixture
    def config(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['billing']['default_bill_type'] = 'Non-GST'
        config['billing']['gst_slabs'] = [0, 5, 12]
        config['billing']['bill_number_prefixes'] = {'GST': 'G', 'Non-GST': 'N', 'Quotation': 'Q'}
        return config

    def test_defaults_from_config(self, config, local_customer):
        editor = BillEditor.from_config(config, customer=local_customer)

        assert editor.bill_type == BillType.NON_GST
        assert editor.financial_year == "2024-25"
        assert editor.company.gst_number == "29ABCDE1234F1Z5"

    def test_configured_slabs_are_enforced(self, config, local_customer, iphone):
        editor = BillEditor.from_config(config, customer=local_customer, bill_type="GST")
        editor.add_product(iphone)

        with pytest.raises(DraftValidationError) as exc:
            editor.save()

        assert any("not a valid slab" in err for err in exc.value.errors)

    def test_configured_prefix(self, config, local_customer):
        editor = BillEditor.from_config(config, customer=local_customer)
        editor.add_item(LineItemInput(product_name="Notebook", quantity=3, rate=60, gst_rate=12))

        assert editor.save(sequence=3).bill_number == "N/24/0003"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
