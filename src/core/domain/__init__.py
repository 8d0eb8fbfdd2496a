"""Domain models and entities.

- Pure, strict data structures (Pydantic v2) live here.
- The domain knows nothing about HTTP, HTML, or the CLI: only catalog concepts.
"""
