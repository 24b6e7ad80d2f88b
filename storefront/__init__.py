"""
Storefront backend for the MJ TECH catalog.

A FastAPI service exposing the public product listing (from the local
database or the Mercado Livre marketplace, with a canned fallback) and a
bearer-token admin area for products, users and store settings.
"""

__version__ = "2.0.0"
