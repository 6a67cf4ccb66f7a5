"""Asset URL rewriting for HuggingFace-hosted files.

Files produced by Gradio Spaces live under `https://<space>.hf.space/gradio_api/file=...`
and are routed through the same-origin image proxy so browsers can fetch them.
Rewriting requires both the `.hf.space` host suffix and the `/gradio_api/file=` path
prefix. A plain substring check is used only when the value cannot be parsed into a
host.
"""

from urllib.parse import quote, urlsplit

from imagegate.image.provider_config import PROXY_IMAGE_PATH

HF_HOST_SUFFIX = ".hf.space"
GRADIO_FILE_PATH = "/gradio_api/file="

# Same unreserved set as JavaScript's encodeURIComponent.
URI_SAFE_CHARS = "!'()*"


def get_origin(request) -> str:
    """Return `scheme://host[:port]` of an incoming request, or "" if unavailable."""
    try:
        url = request.url
    except AttributeError:
        return ""
    if not url.scheme or not url.netloc:
        return ""
    return f"{url.scheme}://{url.netloc}"


def _proxy(origin: str, url: str) -> str:
    return f"{origin}{PROXY_IMAGE_PATH}?url={quote(url, safe=URI_SAFE_CHARS)}"


def to_proxy_url(origin: str, url: str) -> str:
    """Rewrite a HuggingFace Space file URL to the same-origin proxy URL.

    Args:
        origin: Origin of the serving API; empty disables rewriting.
        url: Asset URL returned by a provider.

    Returns:
        Proxy URL for matching Space file URLs, otherwise `url` unchanged.
    """
    if not origin:
        return url

    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
    except ValueError:
        hostname = None

    if hostname:
        if hostname.endswith(HF_HOST_SUFFIX) and parsed.path.startswith(GRADIO_FILE_PATH):
            return _proxy(origin, url)
        return url

    if HF_HOST_SUFFIX + GRADIO_FILE_PATH in url:
        return _proxy(origin, url)

    return url
