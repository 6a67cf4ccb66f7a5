"""Provider/runtime configuration for the image-generation layer.

Architectural role:
    Centralizes backend endpoints, per-model Space wiring, the static model catalog,
    retry/timeout tuning and server-side credential lookup for `imagegate.image`
    clients and `imagegate.api` adapters.

Configuration sources:
    - Environment variables (optionally loaded from `.env` via `load_dotenv()`).
    - Optional key files resolved through `load_key`.

Determinism:
    Deterministic for a fixed process environment and key files. Values are resolved
    at import time (plus runtime key-file reads in `load_key`). All tables are
    read-only after import and shared across requests.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Opt-in request/response debug logging for adapters.
DEBUG = os.getenv("DEBUG") == "true"

# Gradio queue protocol tuning consumed by `gradio_client.call_gradio_api`.
GRADIO_MAX_RETRIES = int(os.getenv("GRADIO_MAX_RETRIES", "3"))
GRADIO_RETRY_BASE_DELAY = float(os.getenv("GRADIO_RETRY_BASE_DELAY", "0.6"))
GRADIO_RETRY_STATUSES = (404, 503)

# Per-call HTTP timeout (seconds) for every upstream request.
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "120"))

GITEE_API_URL = os.getenv("GITEE_API_URL", "https://ai.gitee.com/v1")

MODELSCOPE_API_URL = os.getenv("MODELSCOPE_API_URL", "https://api-inference.modelscope.cn/v1")
MODELSCOPE_POLL_INTERVAL = float(os.getenv("MODELSCOPE_POLL_INTERVAL", "2"))
MODELSCOPE_MAX_POLLS = int(os.getenv("MODELSCOPE_MAX_POLLS", "60"))

# Same-origin proxy endpoint that serves rewritten HuggingFace file URLs.
PROXY_IMAGE_PATH = os.getenv("PROXY_IMAGE_PATH", "/api/proxy-image")

# Fallback target when a requested model id is unknown.
DEFAULT_PROVIDER = "huggingface"
DEFAULT_MODEL = "z-image-turbo"

# Fixed `created` timestamp reported by the static model catalog.
CATALOG_CREATED = 1700000000

# Provider-level settings consumed by the adapter and provider clients.
PROVIDER_CONFIGS = {

    "huggingface": {
        "name": "HuggingFace",
        "requires_auth": False,
        "key_file": "config/huggingface.key"
    },

    "gitee": {
        "name": "Gitee AI",
        "requires_auth": True,
        "key_file": None
    },

    "modelscope": {
        "name": "ModelScope",
        "requires_auth": True,
        "key_file": None
    }

}

# Gradio Space wiring per HuggingFace model.
#   inputs: ordered names of the Space endpoint parameters
#   defaults: values for inputs the public request does not carry
#   image_index / seed_index: positions in the completion data list
HF_SPACES = {

    "z-image-turbo": {
        "base_url": "https://luca115-z-image-turbo.hf.space",
        "endpoint": "generate_image",
        "inputs": ["prompt", "height", "width", "steps", "seed", "randomize_seed"],
        "defaults": {"steps": 9},
        "image_index": 0,
        "seed_index": 1
    },

    "qwen-image-fast": {
        "base_url": "https://mcp-tools-qwen-image-fast.hf.space",
        "endpoint": "infer",
        "inputs": ["prompt", "seed", "randomize_seed", "width", "height", "steps"],
        "defaults": {"steps": 8},
        "image_index": 0,
        "seed_index": 1
    },

    "ovis-image": {
        "base_url": "https://aidc-ai-ovis-image-7b.hf.space",
        "endpoint": "generate",
        "inputs": ["prompt", "negative_prompt", "height", "width", "seed", "steps", "guidance_scale"],
        "defaults": {"steps": 50, "guidance_scale": 5.0, "negative_prompt": ""},
        "image_index": 0,
        "seed_index": None
    },

    "flux-1-schnell": {
        "base_url": "https://black-forest-labs-flux-1-schnell.hf.space",
        "endpoint": "infer",
        "inputs": ["prompt", "seed", "randomize_seed", "width", "height", "steps"],
        "defaults": {"steps": 4},
        "image_index": 0,
        "seed_index": 1
    }

}

# Backend model ids per mirrored platform.
GITEE_MODELS = ["z-image-turbo", "Qwen-Image", "FLUX_1-Krea-dev", "FLUX.1-dev"]

MODELSCOPE_MODELS = [
    "Tongyi-MAI/Z-Image-Turbo",
    "black-forest-labs/FLUX.2-dev",
    "black-forest-labs/FLUX.1-Krea-dev",
    "MusePublic/489_ckpt_FLUX_1",
]

# Short public aliases for mirrored models (public id -> backend model id).
GITEE_ALIASES = {
    "gitee/qwen-image": "Qwen-Image",
    "gitee/flux-1-krea-dev": "FLUX_1-Krea-dev",
    "gitee/flux-1-dev": "FLUX.1-dev",
}

MODELSCOPE_ALIASES = {
    "ms/z-image-turbo": "Tongyi-MAI/Z-Image-Turbo",
    "ms/flux-2": "black-forest-labs/FLUX.2-dev",
    "ms/flux-1-krea-dev": "black-forest-labs/FLUX.1-Krea-dev",
    "ms/flux-1": "MusePublic/489_ckpt_FLUX_1",
}

# Bearer token prefixes that pin a credential to one provider.
TOKEN_PREFIXES = {
    "hf:": "huggingface",
    "gitee:": "gitee",
    "ms:": "modelscope",
}


def provider_name(provider):
    """Return the human-readable label for a provider key."""
    config = PROVIDER_CONFIGS.get(provider)
    if not config:
        return str(provider)
    return config["name"]


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/huggingface.key` -> `HUGGINGFACE_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
