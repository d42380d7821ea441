# ========================================================
# utils/__init__.py
# ========================================================
"""
Small shared utilities.

- auth.py:         auth-provider adapters + FastAPI auth dependencies
- coupon_codes.py: human-typeable coupon code generation
"""
