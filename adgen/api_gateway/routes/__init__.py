"""
API routes.
"""
