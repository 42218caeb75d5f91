"""Company and bank details printed on invoices."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

# Stored document keys that differ from the attribute names.
_RECORD_KEYS = {
    "bank_name": "bankName",
    "account_number": "accountNumber",
    "ifsc_code": "ifscCode",
    "upi_id": "upiId",
    "additional_info": "additionalInfo",
}


@dataclass
class CompanyProfile:
    # Company details
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    gstin: str = ""
    pan: str = ""
    website: str = ""
    # Bank details
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""
    upi_id: str = ""
    additional_info: str = ""

    @staticmethod
    def record_keys() -> list:
        """Stored column names, in declaration order."""
        return [_RECORD_KEYS.get(f.name, f.name) for f in fields(CompanyProfile)]

    def to_record(self) -> Dict[str, str]:
        return {_RECORD_KEYS.get(f.name, f.name): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_record(cls, record: Dict) -> "CompanyProfile":
        """Build a profile; unknown keys are ignored and missing ones are empty."""
        values = {}
        for f in fields(cls):
            value = record.get(_RECORD_KEYS.get(f.name, f.name))
            values[f.name] = "" if value is None else str(value)
        return cls(**values)
