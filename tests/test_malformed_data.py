"""
Malformed Data Tests
Tests the draft validation layer and payload coercion with bad input
"""

import pytest
from utils.validators import DraftValidator, validate_draft
from utils.data_transformer import coerce_number, normalize_bill_type, to_invoice_draft
from models.invoice import BillType


def valid_draft():
    return {
        "bill_type": "GST",
        "customer": {"name": "John Doe", "phone": "+91 9876543210", "state": "Karnataka"},
        "company": {"name": "ElectroMart Pvt Ltd", "state": "Karnataka", "gst_number": "29ABCDE1234F1Z5"},
        "items": [
            {"product_name": "iPhone 15 Pro", "quantity": 1, "rate": 129999, "gst_rate": 18}
        ],
        "discount_percent": 0,
        "payments": [],
    }


class TestMalformedDrafts:
    """Tests that the validator handles malformed drafts gracefully"""

    def setup_method(self):
        """Setup validator for each test"""
        self.validator = DraftValidator()

    def test_valid_draft(self):
        result = self.validator.validate(valid_draft())

        assert result.is_valid
        assert result.errors == []

    def test_completely_empty_draft(self):
        """Test empty dictionary"""
        result = self.validator.validate({})

        assert result.is_valid == False
        assert any("customer" in err for err in result.errors)
        assert any("items" in err for err in result.errors)

    def test_wrong_data_types(self):
        draft = valid_draft()
        draft["customer"] = "John Doe"
        draft["items"] = "items_string"
        draft["discount_percent"] = "ten"

        result = self.validator.validate(draft)

        assert result.is_valid == False
        assert "Customer must be a dictionary" in result.errors
        assert "Items must be a list" in result.errors
        assert "discount_percent must be numeric" in result.errors

    def test_missing_customer_details(self):
        draft = valid_draft()
        draft["customer"] = {"name": "", "phone": "", "state": ""}

        result = self.validator.validate(draft)

        assert "Customer name is required" in result.errors
        assert "Customer phone is required" in result.errors
        assert "Customer state is required" in result.errors

    def test_negative_and_zero_values(self):
        draft = valid_draft()
        draft["items"] = [
            {"product_name": "Item", "quantity": 0, "rate": -100, "gst_rate": 18}
        ]

        result = self.validator.validate(draft)

        assert any("quantity must be positive" in err for err in result.errors)
        assert any("rate cannot be negative" in err for err in result.errors)

    def test_unknown_gst_slab(self):
        draft = valid_draft()
        draft["items"][0]["gst_rate"] = 17

        result = self.validator.validate(draft)

        assert any("not a valid slab" in err for err in result.errors)

    def test_discount_out_of_range(self):
        draft = valid_draft()
        draft["discount_percent"] = 120
        draft["items"][0]["discount_percent"] = -5

        result = self.validator.validate(draft)

        assert any("Discount must be between 0 and 100" in err for err in result.errors)
        assert any("Item 1 discount" in err for err in result.errors)

    def test_gst_bill_requires_company_gstin(self):
        draft = valid_draft()
        draft["company"]["gst_number"] = None

        result = self.validator.validate(draft)

        assert "GST bills require the company GSTIN" in result.errors

    def test_non_gst_bill_without_company_gstin(self):
        draft = valid_draft()
        draft["bill_type"] = "Non-GST"
        draft["company"]["gst_number"] = None

        assert self.validator.validate(draft).is_valid

    def test_invalid_gstin_formats(self):
        """Test various invalid GSTIN formats"""

        invalid_gstins = [
            "123",  # Too short
            "ABCD1234EFGH56789Z1",  # Wrong format
            "29ABCDE1234F1Z",  # Missing character
            "NOT-A-GSTIN",  # Completely wrong
        ]

        for bad_gstin in invalid_gstins:
            draft = valid_draft()
            draft["customer"]["gst_number"] = bad_gstin

            result = self.validator.validate(draft)

            assert result.is_valid == False, f"Should reject GSTIN: {bad_gstin}"
            assert any("GSTIN" in err for err in result.errors)

    def test_bad_payments(self):
        draft = valid_draft()
        draft["payments"] = [
            {"method": "Barter", "amount": 100},
            {"method": "Cash", "amount": -5},
            "cash",
        ]

        result = self.validator.validate(draft)

        assert any("unknown method" in err for err in result.errors)
        assert any("Payment 2 amount must be positive" in err for err in result.errors)
        assert "Payment 3 must be a dictionary" in result.errors

    def test_unknown_bill_type(self):
        draft = valid_draft()
        draft["bill_type"] = "Proforma"

        result = validate_draft(draft)

        assert "Unknown bill type: Proforma" in result.errors

    def test_validate_safe_never_raises(self):
        is_valid, errors = self.validator.validate_safe(None)

        assert is_valid == False
        assert errors


class TestPayloadCoercion:
    """Missing numbers become 0 before the calculator sees them"""

    def test_coerce_number(self):
        assert coerce_number(None) == 0
        assert coerce_number("") == 0
        assert coerce_number("abc") == 0
        assert coerce_number([18]) == 0
        assert coerce_number(True) == 0
        assert coerce_number("12.5") == 12.5
        assert coerce_number(7) == 7.0

    def test_bill_type_aliases(self):
        assert normalize_bill_type("Demo") == BillType.QUOTATION
        assert normalize_bill_type("Non-GST") == BillType.NON_GST
        assert normalize_bill_type(None) == BillType.GST

        with pytest.raises(ValueError):
            normalize_bill_type("Proforma")

    def test_draft_with_missing_numbers(self):
        draft = to_invoice_draft({
            "billType": "GST",
            "customer": {"state": "Delhi"},
            "company": {"state": "Karnataka"},
            "items": [{"productName": "Cable", "quantity": None, "rate": "500", "gstRate": ""}],
            "discountPercent": None,
            "payments": [{"method": "UPI", "amount": None, "date": "2024-09-15T10:30:00.000Z"}],
        })

        assert draft.customer_state == "Delhi"
        assert draft.company_state == "Karnataka"
        assert draft.items[0].quantity == 0
        assert draft.items[0].rate == 500
        assert draft.items[0].gst_rate == 0
        assert draft.discount_percent == 0
        assert draft.payments[0].amount == 0
        assert str(draft.payments[0].paid_on) == "2024-09-15"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
