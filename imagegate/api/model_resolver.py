"""Public model id resolution.

Maps OpenAI-style `model` values onto a provider key and backend model id using the
static tables in `imagegate.image.provider_config`:

    - bare HuggingFace ids (`z-image-turbo`, `flux-1-schnell`, ...)
    - `gitee/<catalog id>` and short Gitee aliases
    - `ms/<catalog id>` and short ModelScope aliases

Unknown or empty ids fall back to `DEFAULT_PROVIDER` / `DEFAULT_MODEL`; resolution
never fails.
"""

from imagegate.core.image_types import (
    PROVIDER_GITEE,
    PROVIDER_HUGGINGFACE,
    PROVIDER_MODELSCOPE,
    ResolvedTarget,
)
from imagegate.image.provider_config import (
    CATALOG_CREATED,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    GITEE_ALIASES,
    GITEE_MODELS,
    HF_SPACES,
    MODELSCOPE_ALIASES,
    MODELSCOPE_MODELS,
)

GITEE_PREFIX = "gitee/"
MODELSCOPE_PREFIX = "ms/"


def _build_alias_table() -> dict:
    table = {model_id: ResolvedTarget(PROVIDER_HUGGINGFACE, model_id) for model_id in HF_SPACES}
    for model_id in GITEE_MODELS:
        table[GITEE_PREFIX + model_id] = ResolvedTarget(PROVIDER_GITEE, model_id)
    for alias, model_id in GITEE_ALIASES.items():
        table[alias] = ResolvedTarget(PROVIDER_GITEE, model_id)
    for model_id in MODELSCOPE_MODELS:
        table[MODELSCOPE_PREFIX + model_id] = ResolvedTarget(PROVIDER_MODELSCOPE, model_id)
    for alias, model_id in MODELSCOPE_ALIASES.items():
        table[alias] = ResolvedTarget(PROVIDER_MODELSCOPE, model_id)
    return table


MODEL_ALIASES = _build_alias_table()


def resolve_model(model_id: str | None) -> ResolvedTarget:
    """Resolve a public model id, falling back to the default target."""
    if model_id:
        target = MODEL_ALIASES.get(model_id.strip())
        if target is not None:
            return target
    return ResolvedTarget(DEFAULT_PROVIDER, DEFAULT_MODEL)


def list_models() -> dict:
    """Return the static catalog as an OpenAI `models` list."""
    return {
        "object": "list",
        "data": [
            {
                "id": public_id,
                "object": "model",
                "created": CATALOG_CREATED,
                "owned_by": target.provider,
            }
            for public_id, target in MODEL_ALIASES.items()
        ],
    }
