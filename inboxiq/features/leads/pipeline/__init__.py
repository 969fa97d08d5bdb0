"""
Pipeline components for the leads feature.

``recency`` is the leaf; ``detection`` and ``followup`` build on it.
"""

__all__ = ["detection", "followup", "recency"]
