"""
Core architecture components for the storefront order service
"""
