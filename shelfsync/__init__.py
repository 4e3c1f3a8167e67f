"""
shelfsync - Shopify inventory webhook receiver with Xero OAuth onboarding.
"""
__version__ = "1.0.0"
