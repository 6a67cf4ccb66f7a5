"""imagegate API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs request validation, model resolution, credential parsing and response
  shaping (including asset URL rewriting).
- Delegates generation to the provider layer in `imagegate.image`.
"""
