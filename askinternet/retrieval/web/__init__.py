"""Web retrieval subpackage.

Provides the SearxNG search adapter, the page fetcher/extractor, and the fan-out
coordinator that combines them.
"""
