"""
Personal knowledge base assistant.

Ranks a user's notes for a natural-language query and answers from them,
falling back to fixed text when the generative backend is unavailable.
"""

__all__ = [
    "backend",
    "config",
    "errors",
    "ingest",
    "keywords",
    "models",
    "query",
    "ranking",
    "similarity",
    "store",
    "synthesis",
    "vectorizer",
]
