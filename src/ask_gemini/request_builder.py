"""Builds the Gemini generateContent request for a question."""

import json
import logging
import shlex
from urllib.parse import quote, urlencode

from .errors import ConfigError, EmptyInputError, EncodingError
from .models.gemini import AskRequest, GeminiConfig

logger = logging.getLogger(__name__)

REDACTED = "****"


def _model_url(config: GeminiConfig) -> str:
    base = config.api_base_url.rstrip("/")
    model = quote(config.model, safe="-._~")
    return f"{base}/v1beta/models/{model}:generateContent"


def build_url(config: GeminiConfig) -> str:
    """URL for the configured model with the key as a query parameter."""
    return f"{_model_url(config)}?{urlencode({'key': config.api_key or ''})}"


def redacted_url(config: GeminiConfig) -> str:
    return f"{_model_url(config)}?key={REDACTED}"


def encode_body(request: AskRequest) -> bytes:
    """Serialize the request payload as UTF-8 JSON.

    Raises:
        EncodingError: If the question holds text that has no UTF-8 form
            (lone surrogates, usually from a broken paste).
    """
    try:
        return json.dumps(request.to_payload(), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as e:
        raise EncodingError(str(e)) from e


def build_request(question: str, config: GeminiConfig) -> tuple[str, bytes]:
    """Turn a question into ``(url, body)`` ready for a transport.

    Args:
        question: Non-empty question text.
        config: Frozen settings for this ask.

    Returns:
        The destination URL and the encoded JSON body.

    Raises:
        ConfigError: If no API key is configured.
        EmptyInputError: If the question is empty.
        EncodingError: If the question cannot be encoded.
    """
    if not config.has_api_key:
        raise ConfigError()
    if not question:
        raise EmptyInputError("Question is empty")

    body = encode_body(AskRequest(question=question))
    url = build_url(config)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Built request for model {config.model}: {len(body)} bytes to {redacted_url(config)}")
    return url, body


def shell_command(url: str, body: bytes, curl_path: str = "curl") -> str:
    """POSIX shell form of the equivalent curl call, for display only.

    The body is passed inline with ``-d`` here, so every embedded quote is
    escaped by ``shlex.quote``. The real transport sends the body on stdin.
    """
    args = [
        curl_path, "-s", "-X", "POST",
        "-H", "Content-Type: application/json",
        "-d", body.decode("utf-8"),
        url,
    ]
    return shlex.join(args)
