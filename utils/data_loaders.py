"""
Data loaders for catalog, customer and bill files
"""

import json
import pandas as pd
from pathlib import Path
from typing import List, Dict, Optional

from loguru import logger

from models.invoice import Bill, Customer, Product
from utils.data_transformer import to_bill, transform_party


class BillDataLoader:
    """Load and store saved bills"""

    def __init__(self, data_dir: str = "data", filename: str = "bills.json"):
        self.data_dir = Path(data_dir)
        self.bill_file = self.data_dir / filename
        self.bills = self._load_bills()

    def _load_bills(self) -> List[Bill]:
        """Load all bills; a missing file means no bills yet"""
        if not self.bill_file.exists():
            logger.info("No bill file at {}", self.bill_file)
            return []

        with open(self.bill_file) as f:
            raw = json.load(f)

        if isinstance(raw, dict):
            raw = raw.get('bills', [])

        bills = [to_bill(entry) for entry in raw]
        logger.info("Loaded {} bills from {}", len(bills), self.bill_file)
        return bills

    def get_bill(self, bill_number: str) -> Bill:
        """Get specific bill by number or id"""
        for bill in self.bills:
            if bill.bill_number == bill_number or bill.bill_id == bill_number:
                return bill
        raise ValueError(f"Bill {bill_number} not found")

    def bill_numbers(self) -> List[str]:
        return [b.bill_number for b in self.bills]

    def save_bill(self, bill: Bill) -> Path:
        """Insert or replace a bill and write the file back"""
        self.bills = [b for b in self.bills if b.bill_id != bill.bill_id]
        self.bills.insert(0, bill)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.bill_file, 'w') as f:
            json.dump([b.model_dump(mode='json') for b in self.bills], f, indent=2, ensure_ascii=False)

        logger.info("Wrote bill {} to {}", bill.bill_number, self.bill_file)
        return self.bill_file

    def delete_bill(self, bill_number: str) -> None:
        bill = self.get_bill(bill_number)
        self.bills = [b for b in self.bills if b.bill_id != bill.bill_id]
        with open(self.bill_file, 'w') as f:
            json.dump([b.model_dump(mode='json') for b in self.bills], f, indent=2, ensure_ascii=False)


class ProductCatalog:
    """Product catalog backed by a CSV file"""

    def __init__(self, data_dir: str = "data", filename: str = "products.csv"):
        self.data_dir = Path(data_dir)
        self.products_df = self._load_products(self.data_dir / filename)

    def _load_products(self, products_file: Path) -> pd.DataFrame:
        """Load products"""

        df = pd.read_csv(products_file, dtype={'product_id': str, 'hsn_code': str})
        df['gst_rate'] = df['gst_rate'].fillna(18.0).astype(float)
        df['price'] = df['price'].fillna(0.0).astype(float)
        df['stock'] = df['stock'].fillna(0).astype(int)
        df['unit'] = df['unit'].fillna('pcs')

        return df

    def _to_product(self, row) -> Product:
        record = {}
        for k, v in row.items():
            if pd.isna(v):
                record[k] = None
            else:
                record[k] = v.item() if hasattr(v, "item") else v
        return Product(**record)

    def get_product(self, product_id: str) -> Product:
        """Get product by id"""

        matches = self.products_df[self.products_df['product_id'] == str(product_id)]

        if matches.empty:
            raise ValueError(f"Product {product_id} not found")

        return self._to_product(matches.iloc[0])

    def search(self, text: str = "", category: Optional[str] = None) -> List[Product]:
        """Products whose name, category or HSN code contains the text"""

        df = self.products_df
        if text:
            needle = text.lower()
            mask = (
                df['name'].str.lower().str.contains(needle, regex=False)
                | df['category'].fillna('').str.lower().str.contains(needle, regex=False)
                | df['hsn_code'].fillna('').str.contains(needle, regex=False)
            )
            df = df[mask]
        if category:
            df = df[df['category'] == category]

        return [self._to_product(row) for _, row in df.iterrows()]

    def low_stock(self, threshold: int = 10) -> List[Product]:
        df = self.products_df[self.products_df['stock'] <= threshold]
        return [self._to_product(row) for _, row in df.iterrows()]


class CustomerDirectory:
    """Manage customer data"""

    def __init__(self, data_dir: str = "data", filename: str = "customers.json"):
        self.data_dir = Path(data_dir)
        self.customers = self._load_customers(self.data_dir / filename)
        self.phone_index = {c.phone: c for c in self.customers}

    def _load_customers(self, customer_file: Path) -> List[Customer]:
        """Load customer directory"""

        with open(customer_file) as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data['customers']
        return [Customer(**transform_party(c)) for c in data]

    def get_customer(self, customer_id: str) -> Customer:
        for customer in self.customers:
            if customer.customer_id == customer_id:
                return customer
        raise ValueError(f"Customer {customer_id} not found")

    def get_by_phone(self, phone: str) -> Customer:
        """Get customer by phone"""
        customer = self.phone_index.get(phone)
        if not customer:
            raise ValueError(f"Customer with phone {phone} not found")
        return customer

    def search(self, text: str) -> List[Customer]:
        needle = text.lower()
        return [
            c for c in self.customers
            if needle in c.name.lower() or needle in c.phone or needle in (c.email or '').lower()
        ]

    def by_state(self) -> Dict[str, List[Customer]]:
        """Customers grouped by state"""
        grouped: Dict[str, List[Customer]] = {}
        for c in self.customers:
            grouped.setdefault(c.state, []).append(c)
        return grouped
