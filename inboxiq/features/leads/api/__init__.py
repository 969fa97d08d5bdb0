"""
HTTP surface for the leads feature.
"""
