"""
Interactive terminal adapter for imagegate.

Architectural role:
- Exposes image generation from a terminal, with runtime model switching.
- Reuses the same adapter pipeline as the HTTP API (`adapter.generate_from_body`),
  so validation, credential checks and error classification are identical.

Request lifecycle (per prompt):
1. Read stdin.
2. Handle local commands (`exit`/`quit`, `/model`).
3. Send the prompt through the adapter with the active model.
4. Print the image URL, or the classified error kind and message.

Credentials:
- `IMAGEGATE_TOKEN` is used as the `Authorization` value (with or without the
  `Bearer ` prefix; provider prefixes such as `ms:` are honored).

Error handling strategy:
- `CanonicalError` failures are printed and the loop continues.
- EOF and keyboard interrupts terminate the loop without traceback output.

Side effects:
- Writes to stdout for operator feedback.
- No URL rewriting: there is no serving origin for the image proxy.
"""

import logging
import os

from imagegate.api.adapter import generate_from_body
from imagegate.api.model_resolver import MODEL_ALIASES
from imagegate.core.errors import CanonicalError
from imagegate.image.provider_config import DEBUG, DEFAULT_MODEL

current_model = DEFAULT_MODEL


def set_model(model_id):
    """Update the active model when it exists in the catalog."""
    global current_model

    if model_id not in MODEL_ALIASES:
        return False

    current_model = model_id
    return True


def run_prompt(prompt: str, model: str, token: str | None = None) -> str:
    """Generate one image and return a printable result line."""
    try:
        response = generate_from_body({"prompt": prompt, "model": model}, token, origin="")
    except CanonicalError as err:
        return f"[{err.kind.value}] {err.message}"
    return response["data"][0]["url"]


def print_models():
    print("\nAvailable models:")
    for model_id, target in MODEL_ALIASES.items():
        marker = " (active)" if model_id == current_model else ""
        print(f" - {model_id} [{target.provider}]{marker}")
    print("\nUsage:")
    print(" /model <model_id>")
    print(" /model help")
    print(f"\nCurrent model: {current_model}\n")


# =========================================================
# MAIN
# =========================================================

def main():
    """
    Run the prompt loop.

    Error handling strategy:
    - Generation failures print their classified kind and continue.
    - EOF/interrupt are handled without stack traces.
    """
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    token = os.getenv("IMAGEGATE_TOKEN")

    print("imagegate started. (Type 'exit' to quit, '/model help' for models)")
    print(f"Active model: {current_model}\n")
    print("-" * 60)

    while True:

        try:
            prompt = input("Prompt: ").strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if not prompt:
            continue

        if prompt.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        # MODEL COMMAND (local trigger for model switching)
        if prompt.lower().startswith("/model"):
            parts = prompt.split()

            if len(parts) == 1 or parts[1].lower() == "help":
                print_models()
                continue

            if set_model(parts[1]):
                print(f"\nSwitched to model: {current_model}\n")
            else:
                print(f"\nModel '{parts[1]}' not found.\n")
            continue

        print("\nGenerating...\n")
        print(run_prompt(prompt, current_model, token))
        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
