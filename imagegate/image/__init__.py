"""Image generation provider package.

Scope:
    Provider clients (Gradio queue on HuggingFace Spaces, Gitee AI, ModelScope),
    upstream error classification, event-stream parsing and provider dispatch.

Non-goals:
    - No image processing or Base64 decoding.
    - No state kept across requests beyond read-only configuration.
"""
