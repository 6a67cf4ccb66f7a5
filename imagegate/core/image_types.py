"""Request/result data contracts for the image-generation pipeline.

Architectural role:
    Defines the immutable records exchanged between the HTTP adapter
    (`imagegate.api.adapter`), model resolution, and provider clients under
    `imagegate.image`.

Lifecycle:
    All records are created per inbound call and discarded when the call completes.
    None of them is persisted or shared across requests.

Determinism:
    The data classes are purely structural and state-free.
"""

from dataclasses import dataclass, field


PROVIDER_HUGGINGFACE = "huggingface"
PROVIDER_GITEE = "gitee"
PROVIDER_MODELSCOPE = "modelscope"


@dataclass(frozen=True)
class GenerationRequest:
    """Validated public `images/generations` request.

    Attributes:
        prompt: Non-empty text prompt.
        model: Requested public model id (may be an alias or unknown).
        n: Number of images; only `1` is accepted.
        response_format: Only `"url"` is accepted.
        size: Optional OpenAI-style `WIDTHxHEIGHT` string.
        negative_prompt: Optional negative prompt forwarded to capable backends.
        seed: Optional fixed seed.
        steps: Optional inference step count.
    """

    prompt: str
    model: str = ""
    n: int = 1
    response_format: str = "url"
    size: str | None = None
    negative_prompt: str | None = None
    seed: int | None = None
    steps: int | None = None


@dataclass(frozen=True)
class ResolvedTarget:
    """Concrete provider + backend model id derived from a public model id."""

    provider: str
    model: str


@dataclass(frozen=True)
class Credential:
    """Bearer credential parsed from the `Authorization` header.

    `provider_hint` is set when the token carried a provider prefix; the prefix is
    stripped from `token`.
    """

    token: str | None = None
    provider_hint: str | None = None


@dataclass(frozen=True)
class QueueJob:
    """Accepted Gradio queue job, consumed once by the result call."""

    event_id: str


@dataclass(frozen=True)
class ImageRequest:
    """Provider-facing invocation shape produced by `adapter.convert_request`."""

    prompt: str
    model: str
    width: int = 1024
    height: int = 1024
    negative_prompt: str | None = None
    steps: int | None = None
    seed: int | None = None
    auth_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class ImageResult:
    """Normalized provider output: asset URL plus generation metadata."""

    url: str
    provider: str
    model: str
    seed: int | None = None
    width: int | None = None
    height: int | None = None
