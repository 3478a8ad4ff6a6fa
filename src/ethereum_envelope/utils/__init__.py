"""
Utility functions used by the transaction codec.
"""
