"""Core contracts package.

Composition:
    - `errors`: Canonical error taxonomy and HTTP status mapping.
    - `image_types`: Immutable request/result records shared by API and provider layers.

Determinism and side effects:
    Package import is deterministic and side-effect free.
"""
