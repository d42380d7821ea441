# ==================================================
# handlers/__init__.py
# ==================================================
"""
HTTP Route Handlers Package.

Each module exposes an APIRouter and a register_handlers(app) hook:

- core.py:    login / logout / current user
- wheel.py:   prizes, wheel config, spin, buy spins
- shop.py:    products, coupons, orders
- support.py: jewelry customization & inquiry requests
- admin.py:   admin-only inventory, prize, order and support management
"""
