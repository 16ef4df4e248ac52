"""Ranking package.

Scope:
    - `batch`: embedding-request batch construction and response pairing.
    - `similarity`: cosine scoring and top-N selection.
"""
