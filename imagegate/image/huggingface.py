"""HuggingFace Spaces image-generation provider.

Processing flow:
    1. Look up the Space wiring for the backend model in `HF_SPACES`.
    2. Assemble the ordered endpoint inputs from the `ImageRequest`.
    3. Run the Gradio queue protocol through `gradio_client.call_gradio_api`.
    4. Resolve the image URL (and seed, when exposed) from the output list.

Credentials:
    The caller's token wins; otherwise the server-side key from `load_key` is used.
    Public Spaces accept anonymous calls, so a missing token is not an error.

Error handling strategy:
    Queue failures arrive already classified. Unknown models and unusable output
    shapes raise provider errors.
"""

import random

from imagegate.core import errors
from imagegate.core.image_types import ImageRequest, ImageResult, PROVIDER_HUGGINGFACE
from imagegate.image.classifier import HUGGINGFACE
from imagegate.image.gradio_client import call_gradio_api
from imagegate.image.provider_config import HF_SPACES, PROVIDER_CONFIGS, load_key

MAX_SEED = 2**31 - 1


def build_inputs(space: dict, request: ImageRequest, seed: int) -> list:
    """Return endpoint inputs in the order declared by the Space wiring."""
    values = {
        "prompt": request.prompt,
        "negative_prompt": request.negative_prompt,
        "width": request.width,
        "height": request.height,
        "resolution": f"{request.width}x{request.height}",
        "steps": request.steps,
        "seed": seed,
        # A fixed seed is always sent, so Space-side randomization stays off.
        "randomize_seed": False,
    }
    defaults = space.get("defaults", {})

    inputs = []
    for name in space["inputs"]:
        value = values.get(name)
        if value is None:
            value = defaults.get(name)
        inputs.append(value)
    return inputs


def extract_image_url(value, base_url: str) -> str | None:
    """Resolve an image URL from a Gradio output value.

    Accepted shapes:
        - FileData dict with `url`, or with `path` only (served under `/gradio_api/file=`)
        - plain string (absolute URL or Space-local file path)
        - gallery list whose first item is FileData, `{"image": FileData}` or
          `[FileData, caption]`
    """
    if isinstance(value, dict):
        if "image" in value and isinstance(value["image"], (dict, str)):
            return extract_image_url(value["image"], base_url)
        if value.get("url"):
            return value["url"]
        if value.get("path"):
            return f"{base_url}/gradio_api/file={value['path']}"
        return None

    if isinstance(value, str) and value:
        if value.startswith(("http://", "https://", "data:")):
            return value
        return f"{base_url}/gradio_api/file={value}"

    if isinstance(value, (list, tuple)) and value:
        return extract_image_url(value[0], base_url)

    return None


def _extract_seed(outputs: list, index, fallback: int) -> int:
    if index is None or index >= len(outputs):
        return fallback
    try:
        return int(outputs[index])
    except (TypeError, ValueError):
        return fallback


def generate(request: ImageRequest) -> ImageResult:
    """Generate one image on the Space backing `request.model`.

    Raises:
        CanonicalError: unknown model, classified queue failure, or no image URL in
        the completion payload.
    """
    space = HF_SPACES.get(request.model)
    if not space:
        raise errors.provider_error(HUGGINGFACE, f"Unknown HuggingFace model: {request.model}")

    token = request.auth_token or load_key(PROVIDER_CONFIGS[PROVIDER_HUGGINGFACE]["key_file"])
    seed = request.seed if request.seed is not None else random.randint(0, MAX_SEED)

    outputs = call_gradio_api(
        space["base_url"],
        space["endpoint"],
        build_inputs(space, request, seed),
        token,
    )

    image_index = space.get("image_index", 0)
    image_value = outputs[image_index] if image_index < len(outputs) else None
    url = extract_image_url(image_value, space["base_url"])
    if not url:
        raise errors.provider_error(HUGGINGFACE, "No image URL in completion payload")

    return ImageResult(
        url=url,
        provider=PROVIDER_HUGGINGFACE,
        model=request.model,
        seed=_extract_seed(outputs, space.get("seed_index"), seed),
        width=request.width,
        height=request.height,
    )
