"""Prompting package.

Deterministic construction of the grounding instruction/context pair and the
search-term rewrite instruction. No retrieval, ranking, or model invocation.
"""
