"""LLM access package.

Module split:
    - `client`: OpenAI-compatible chat-completion transport over `requests`.
    - `service`: search-term rewrite on top of the transport.
"""
