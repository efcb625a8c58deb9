"""
Marketplace Revenue Analytics

Seller-scoped and platform-scoped revenue read-models for a multi-seller
marketplace.
"""

__version__ = "1.0.0"
