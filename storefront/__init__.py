"""
                Food Storefront

Cart and checkout backend for a food-ordering storefront: per-customer
carts, modifier validation, line and order pricing, and order placement.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
