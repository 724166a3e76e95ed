"""
Configuration management
"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any
from dotenv import load_dotenv

from models.invoice import CompanyProfile

# Load environment variables
load_dotenv()


DEFAULT_CONFIG: Dict[str, Any] = {
    'company': {
        'name': 'ElectroMart Pvt Ltd',
        'address': '123 Business Park, Electronic City',
        'city': 'Bangalore',
        'state': 'Karnataka',
        'state_code': '29',
        'pincode': '560100',
        'gst_number': '29ABCDE1234F1Z5',
        'phone': '+91 80 2345 6789',
        'email': 'info@electromart.com',
    },
    'billing': {
        'financial_year': '2024-25',
        'default_bill_type': 'GST',
        'gst_slabs': [0, 0.25, 3, 5, 12, 18, 28],
        'bill_number_prefixes': {'GST': 'GST', 'Non-GST': 'NGST', 'Quotation': 'QUO'},
    },
    'audit': {
        'tolerance': 0.01,
        'high_value_threshold': 1000000,
    },
    'data': {
        'dir': './data',
    },
    'reports': {
        'dir': './reports',
    },
    'logging': {
        'level': 'INFO',
    },
}


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""

    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file) as f:
        loaded = yaml.safe_load(f) or {}

    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values

    return apply_env_overrides(config)


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override with environment variables if present"""

    if os.getenv('BILLING_FINANCIAL_YEAR'):
        config['billing']['financial_year'] = os.getenv('BILLING_FINANCIAL_YEAR')
    if os.getenv('BILLING_COMPANY_STATE'):
        config['company']['state'] = os.getenv('BILLING_COMPANY_STATE')
        config['company']['state_code'] = None
    if os.getenv('BILLING_DATA_DIR'):
        config['data']['dir'] = os.getenv('BILLING_DATA_DIR')
    if os.getenv('LOG_LEVEL'):
        config['logging']['level'] = os.getenv('LOG_LEVEL')

    return config


def get_company_profile(config: Dict = None) -> CompanyProfile:
    """Seller profile from the company section"""

    if config is None:
        config = load_config()

    return CompanyProfile(**config.get('company', DEFAULT_CONFIG['company']))


def get_data_path(filename: str, config: Dict = None) -> Path:
    """Get path to data file"""

    if config is None:
        config = load_config()

    data_dir = Path(config.get('data', {}).get('dir', './data'))
    return data_dir / filename
