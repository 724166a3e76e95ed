"""
Indian state / union territory GST codes
"""

from typing import Optional


STATE_CODES = {
    'Jammu and Kashmir': '01', 'Himachal Pradesh': '02', 'Punjab': '03',
    'Chandigarh': '04', 'Uttarakhand': '05', 'Haryana': '06',
    'Delhi': '07', 'Rajasthan': '08', 'Uttar Pradesh': '09',
    'Bihar': '10', 'Sikkim': '11', 'Arunachal Pradesh': '12',
    'Nagaland': '13', 'Manipur': '14', 'Mizoram': '15',
    'Tripura': '16', 'Meghalaya': '17', 'Assam': '18',
    'West Bengal': '19', 'Jharkhand': '20', 'Odisha': '21',
    'Chhattisgarh': '22', 'Madhya Pradesh': '23', 'Gujarat': '24',
    'Dadra and Nagar Haveli and Daman and Diu': '26', 'Maharashtra': '27',
    'Karnataka': '29', 'Goa': '30', 'Lakshadweep': '31',
    'Kerala': '32', 'Tamil Nadu': '33', 'Puducherry': '34',
    'Andaman and Nicobar Islands': '35', 'Telangana': '36',
    'Andhra Pradesh': '37', 'Ladakh': '38',
}

_STATES_BY_CODE = {code: name for name, code in STATE_CODES.items()}


def state_code_for(state: str) -> Optional[str]:
    """GST state code for a state name (case-insensitive)"""
    if not state:
        return None
    wanted = state.strip().lower()
    for name, code in STATE_CODES.items():
        if name.lower() == wanted:
            return code
    return None


def state_from_gstin(gstin: str) -> Optional[str]:
    """State name from the first two digits of a GSTIN"""
    if not gstin or len(gstin) < 2:
        return None
    return _STATES_BY_CODE.get(gstin[:2])
