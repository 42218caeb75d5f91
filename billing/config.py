"""Configuration constants for the billing desk."""

import os
from pathlib import Path

# Excel workbook that stores invoices, company profiles and printer settings.
WORKBOOK_PATH: Path = Path(os.environ.get("BILLING_WORKBOOK", "data/billing.xlsx"))

# Account the desk issues invoices for.
ACCOUNT_ID: str = os.environ.get("BILLING_ACCOUNT", "default")

# Name of the Windows printer to target for receipts.
PRINTER_NAME: str = os.environ.get("BILLING_PRINTER", "Star TSP700II (TSP743II)")

# Symbol printed before every amount.
CURRENCY_SYMBOL: str = os.environ.get("BILLING_CURRENCY", "₹")

# Window title and fallback receipt header when no company name is set.
STORE_HEADER: str = os.environ.get("BILLING_HEADER", "Billing Desk")

# How many times a save re-reads the last number after a collision.
MAX_NUMBER_ATTEMPTS: int = int(os.environ.get("BILLING_NUMBER_ATTEMPTS", "3"))

LOG_LEVEL: str = os.environ.get("BILLING_LOG_LEVEL", "INFO")
