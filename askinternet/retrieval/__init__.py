"""Retrieval package.

Scope:
    - `chunker`: UTF-8-safe splitting of extracted text into embedding inputs.
    - `web`: web search, concurrent page fetch, and readable-text extraction.
"""
