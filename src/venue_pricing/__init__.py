"""
Venue Pricing Package

Tax and fee pricing for a venue/event back office.
Prices packages and services as Base Price → Fees → Taxes with an itemized breakdown.
"""

__version__ = "1.0.0"
