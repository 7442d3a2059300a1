"""
QR menu backend - storefront and admin API over an offline-first tenant data store
"""

__version__ = "1.0.0"
