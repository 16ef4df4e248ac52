"""Core orchestration package.

Composition:
    - `context`: cancellable request context threaded through every stage.
    - `engine`: end-to-end question answering over web retrieval and ranking.
"""
