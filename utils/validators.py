"""
Validation Layer for Bill Drafts
Caller-side checks run before a draft is saved; the tax calculator itself
accepts anything numeric
"""

from typing import Dict, List, Tuple, Optional
import re

from models.invoice import BillType, PaymentMethod


GST_SLABS = [0, 0.25, 3, 5, 12, 18, 28]


class ValidationResult:
    """Result of validation check"""

    def __init__(self, is_valid: bool, errors: List[str] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def __bool__(self):
        return self.is_valid

    def add_error(self, error: str):
        self.errors.append(error)
        self.is_valid = False


class DraftValidator:
    """
    Bill draft validator
    Stops incomplete or nonsensical drafts from being saved
    """

    def __init__(self, gst_slabs: Optional[List[float]] = None):
        self.gstin_pattern = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[0-9A-Z]{1}[Z]{1}[0-9A-Z]{1}$')
        self.gst_slabs = gst_slabs if gst_slabs is not None else GST_SLABS
        self.required_fields = [
            'bill_type',
            'customer',
            'company',
            'items',
        ]

    def validate(self, draft: Dict) -> ValidationResult:
        """
        Validation of a draft payload

        Args:
            draft: Draft dictionary (snake_case, as produced by the bill editor)

        Returns:
            ValidationResult with is_valid flag and error list
        """
        result = ValidationResult(is_valid=True)

        # 1. Check required fields
        self._validate_required_fields(draft, result)
        if not result:
            return result

        # 2. Parties
        self._validate_parties(draft, result)

        # 3. Bill type and discount
        self._validate_bill_rules(draft, result)

        # 4. Line items
        self._validate_line_items(draft, result)

        # 5. Payments
        self._validate_payments(draft, result)

        return result

    def _validate_required_fields(self, data: Dict, result: ValidationResult):
        """Check all required fields are present"""
        for field in self.required_fields:
            if data.get(field) is None:
                result.add_error(f"Missing required field: {field}")

    def _validate_parties(self, data: Dict, result: ValidationResult):
        """Customer and company details"""

        customer = data['customer']
        if not isinstance(customer, dict):
            result.add_error("Customer must be a dictionary")
        else:
            if not customer.get('name'):
                result.add_error("Customer name is required")
            if not customer.get('phone'):
                result.add_error("Customer phone is required")
            if not customer.get('state'):
                result.add_error("Customer state is required")
            gstin = customer.get('gst_number')
            if gstin and not self.gstin_pattern.match(gstin):
                result.add_error(f"Invalid customer GSTIN format: {gstin}")

        company = data['company']
        if not isinstance(company, dict):
            result.add_error("Company must be a dictionary")
        else:
            if not company.get('state'):
                result.add_error("Company state is required")
            gstin = company.get('gst_number')
            if gstin and not self.gstin_pattern.match(gstin):
                result.add_error(f"Invalid company GSTIN format: {gstin}")

    def _validate_bill_rules(self, data: Dict, result: ValidationResult):
        """Bill type and invoice level discount"""

        try:
            bill_type = BillType(data['bill_type'])
        except ValueError:
            result.add_error(f"Unknown bill type: {data['bill_type']}")
            bill_type = None

        if bill_type == BillType.GST and isinstance(data.get('company'), dict):
            if not data['company'].get('gst_number'):
                result.add_error("GST bills require the company GSTIN")

        discount = data.get('discount_percent', 0)
        try:
            discount = float(discount)
            if discount < 0 or discount > 100:
                result.add_error(f"Discount must be between 0 and 100: {discount}")
        except (TypeError, ValueError):
            result.add_error("discount_percent must be numeric")

    def _validate_line_items(self, data: Dict, result: ValidationResult):
        """Validate line items"""

        items = data['items']
        if not isinstance(items, list):
            result.add_error("Items must be a list")
            return
        if len(items) == 0:
            result.add_error("Bill must have at least one item")
            return

        for i, item in enumerate(items, 1):
            if not isinstance(item, dict):
                result.add_error(f"Item {i} must be a dictionary")
                continue

            if not item.get('product_name'):
                result.add_error(f"Item {i} missing field: product_name")

            try:
                qty = float(item.get('quantity'))
                if qty <= 0:
                    result.add_error(f"Item {i} quantity must be positive")
            except (TypeError, ValueError):
                result.add_error(f"Item {i} quantity must be numeric")

            try:
                rate = float(item.get('rate'))
                if rate < 0:
                    result.add_error(f"Item {i} rate cannot be negative")
            except (TypeError, ValueError):
                result.add_error(f"Item {i} rate must be numeric")

            try:
                gst_rate = float(item.get('gst_rate', 0))
                if gst_rate not in self.gst_slabs:
                    result.add_error(f"Item {i} GST rate {gst_rate}% is not a valid slab")
            except (TypeError, ValueError):
                result.add_error(f"Item {i} gst_rate must be numeric")

            try:
                discount = float(item.get('discount_percent', 0))
                if discount < 0 or discount > 100:
                    result.add_error(f"Item {i} discount must be between 0 and 100")
            except (TypeError, ValueError):
                result.add_error(f"Item {i} discount_percent must be numeric")

    def _validate_payments(self, data: Dict, result: ValidationResult):
        """Validate payment entries"""

        payments = data.get('payments') or []
        if not isinstance(payments, list):
            result.add_error("Payments must be a list")
            return

        methods = {m.value for m in PaymentMethod}
        for i, payment in enumerate(payments, 1):
            if not isinstance(payment, dict):
                result.add_error(f"Payment {i} must be a dictionary")
                continue
            if payment.get('method') not in methods:
                result.add_error(f"Payment {i} has unknown method: {payment.get('method')}")
            try:
                if float(payment.get('amount')) <= 0:
                    result.add_error(f"Payment {i} amount must be positive")
            except (TypeError, ValueError):
                result.add_error(f"Payment {i} amount must be numeric")

    def validate_safe(self, draft: Dict) -> Tuple[bool, List[str]]:
        """
        Safe validation that never throws exceptions

        Returns:
            (is_valid, error_list)
        """
        try:
            result = self.validate(draft)
            return result.is_valid, result.errors
        except Exception as e:
            return False, [f"Validation error: {str(e)}"]


# Convenience function
def validate_draft(draft: Dict) -> ValidationResult:
    """
    Quick validation function

    Usage:
        result = validate_draft(draft_dict)
        if not result:
            print(f"Validation errors: {result.errors}")
    """
    validator = DraftValidator()
    return validator.validate(draft)
