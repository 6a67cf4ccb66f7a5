"""Provider dispatcher for image generation.

Role in pipeline:
    - Receives a converted `ImageRequest` plus the resolved provider key from the
      HTTP adapter (or the CLI).
    - Selects the provider generation flow.
    - Returns the provider `ImageResult` unchanged.

Error handling strategy:
    Provider flows raise `CanonicalError`; this layer propagates them untouched.
    An unknown provider key is a provider error.
"""

from imagegate.core import errors
from imagegate.core.image_types import (
    ImageRequest,
    ImageResult,
    PROVIDER_GITEE,
    PROVIDER_HUGGINGFACE,
    PROVIDER_MODELSCOPE,
)
from imagegate.image import client, huggingface, modelscope_client

GENERATORS = {
    PROVIDER_HUGGINGFACE: huggingface.generate,
    PROVIDER_GITEE: client.generate,
    PROVIDER_MODELSCOPE: modelscope_client.generate,
}


def get_provider(provider: str):
    """Return the generation callable registered for `provider`."""
    generator = GENERATORS.get(provider)
    if generator is None:
        raise errors.provider_error(str(provider), f"Unknown image provider: {provider}")
    return generator


def generate_image(provider: str, request: ImageRequest) -> ImageResult:
    """Generate one image with the given provider."""
    return get_provider(provider)(request)
