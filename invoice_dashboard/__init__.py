"""
Invoice Dashboard Package

This package provides a FastAPI service for the invoice dashboard:
session-gated pages for listing, creating, updating and deleting
customer invoices stored in Supabase.
"""

__version__ = "1.0.0"
