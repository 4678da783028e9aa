"""
Cross-cutting runtime helpers.
"""
