"""
Bill numbers and financial years
"""

from datetime import date
from typing import Dict, Optional, Union

from models.invoice import BillType


DEFAULT_PREFIXES: Dict[str, str] = {
    BillType.GST.value: "GST",
    BillType.NON_GST.value: "NGST",
    BillType.QUOTATION.value: "QUO",
}


def financial_year_for(day: date) -> str:
    """Indian financial year (April to March) containing the date, e.g. '2024-25'"""
    start = day.year if day.month >= 4 else day.year - 1
    return f"{start}-{str(start + 1)[-2:]}"


def prefix_for(bill_type: Union[BillType, str], prefixes: Optional[Dict[str, str]] = None) -> str:
    bill_type = BillType(bill_type)
    return (prefixes or DEFAULT_PREFIXES).get(bill_type.value, DEFAULT_PREFIXES[bill_type.value])


def number_matches_type(
    bill_number: str,
    bill_type: Union[BillType, str],
    prefixes: Optional[Dict[str, str]] = None
) -> bool:
    """True when the bill number carries the prefix of this bill type"""
    return bill_number.split("/")[0] == prefix_for(bill_type, prefixes)


def generate_bill_number(
    bill_type: Union[BillType, str],
    financial_year: str,
    sequence: int,
    prefixes: Optional[Dict[str, str]] = None
) -> str:
    """
    Build a bill number such as GST/24/0007

    The middle part is the last two digits of the financial year's start.
    """
    if sequence < 1:
        raise ValueError(f"Bill sequence must be positive: {sequence}")

    prefix = prefix_for(bill_type, prefixes)
    year = financial_year.split("-")[0][-2:]
    return f"{prefix}/{year}/{sequence:04d}"


def next_sequence(existing_numbers, bill_type: Union[BillType, str], financial_year: str,
                  prefixes: Optional[Dict[str, str]] = None) -> int:
    """Next free sequence for a bill type within a financial year"""
    prefix = prefix_for(bill_type, prefixes)
    year = financial_year.split("-")[0][-2:]

    highest = 0
    for number in existing_numbers:
        parts = number.split("/")
        if len(parts) != 3 or parts[0] != prefix or parts[1] != year:
            continue
        if parts[2].isdigit():
            highest = max(highest, int(parts[2]))
    return highest + 1
