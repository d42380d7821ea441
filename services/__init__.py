# ========================================================
# services/__init__.py
# ========================================================
"""
Business Logic Services.

Contains reusable service modules decoupled from handlers:

- wheel.py:    weighted prize selection, coupon codes, the spin transaction
- payments.py: mocked spin purchases
- checkout.py: coupon validation and order creation with redemption
"""
