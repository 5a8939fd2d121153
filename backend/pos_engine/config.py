# backend/pos_engine/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/pos_engine.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///pos_engine.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Base sales tax in basis points (875 = 8.75%)
    POS_TAX_RATE_BPS = int(os.environ.get("POS_TAX_RATE_BPS", "875"))

    POS_TRANSACTION_PREFIX = os.environ.get("POS_TRANSACTION_PREFIX", "TXN")
    POS_SEARCH_LIMIT = int(os.environ.get("POS_SEARCH_LIMIT", "25"))

    # Receipt text
    POS_BUSINESS_NAME = os.environ.get("POS_BUSINESS_NAME", "Wholesale Distributor")
    POS_RECEIPT_HEADER = os.environ.get("POS_RECEIPT_HEADER", "Thank you for shopping with us!")
    POS_RECEIPT_FOOTER = os.environ.get("POS_RECEIPT_FOOTER", "")
