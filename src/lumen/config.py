"""Configuration: frozen ProviderConfig resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeVar

from lumen.errors import ConfigurationError
from lumen.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

ProviderName = Literal["vertex", "gemini"]

DEFAULT_PROVIDER: ProviderName = "vertex"
DEFAULT_MODEL_IDS: dict[ProviderName, str] = {
    "vertex": "gemini-2.5-pro-exp-03-25",
    "gemini": "gemini-2.5-pro-exp-03-25",
}
DEFAULT_GCP_LOCATION = "us-central1"
DEFAULT_TEMPERATURE = 0.0
DEFAULT_USE_STREAMING = True
DEFAULT_MAX_OUTPUT_TOKENS = 8192
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000

_MODEL_ENV_VARS: dict[ProviderName, str] = {
    "vertex": "VERTEX_MODEL_ID",
    "gemini": "GEMINI_MODEL_ID",
}

N = TypeVar("N", int, float)


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable per-process settings for generative calls.

    Exactly one credential set is populated: ``gcp_project``/``gcp_location``
    for ``vertex``, ``api_key`` for ``gemini``.

    Example:
        config = ProviderConfig(provider="gemini", model="gemini-2.0-flash", api_key="...")
    """

    provider: ProviderName
    model: str
    temperature: float = DEFAULT_TEMPERATURE
    use_streaming: bool = DEFAULT_USE_STREAMING
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    request_timeout_s: float | None = None
    retry_fatal_errors: bool = True
    gcp_project: str | None = None
    gcp_location: str | None = None
    api_key: str | None = None

    def __post_init__(self) -> None:
        """Validate credentials and numeric ranges."""
        if self.provider not in ("vertex", "gemini"):
            raise ConfigurationError(
                f"Unknown provider: {self.provider!r}",
                hint="Set AI_PROVIDER to 'vertex' or 'gemini'.",
            )

        if self.provider == "vertex":
            if not self.gcp_project:
                raise ConfigurationError(
                    "GOOGLE_CLOUD_PROJECT is required for the vertex provider",
                    hint="Set GOOGLE_CLOUD_PROJECT or switch AI_PROVIDER to 'gemini'.",
                )
            if not self.gcp_location:
                raise ConfigurationError(
                    "GOOGLE_CLOUD_LOCATION is required for the vertex provider",
                    hint=f"Set GOOGLE_CLOUD_LOCATION (e.g. {DEFAULT_GCP_LOCATION}).",
                )
            if self.api_key:
                raise ConfigurationError(
                    "api_key must not be set for the vertex provider",
                    hint="Vertex AI authenticates with application default credentials.",
                )
        else:
            if not self.api_key:
                raise ConfigurationError(
                    "GEMINI_API_KEY is required for the gemini provider",
                    hint="Set GEMINI_API_KEY or switch AI_PROVIDER to 'vertex'.",
                )
            if self.gcp_project or self.gcp_location:
                raise ConfigurationError(
                    "gcp_project/gcp_location must not be set for the gemini provider",
                )

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature must be within [0.0, 2.0], got {self.temperature}"
            )
        if self.max_output_tokens <= 0:
            raise ConfigurationError(
                f"max_output_tokens must be > 0, got {self.max_output_tokens}"
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}"
            )
        if self.retry_delay_ms < 0:
            raise ConfigurationError(
                f"retry_delay_ms must be >= 0, got {self.retry_delay_ms}"
            )
        if self.request_timeout_s is not None and self.request_timeout_s <= 0:
            raise ConfigurationError(
                f"request_timeout_s must be > 0, got {self.request_timeout_s}"
            )

    @property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy derived from the retry settings."""
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_ms=self.retry_delay_ms,
            attempt_timeout_s=self.request_timeout_s,
            retry_fatal=self.retry_fatal_errors,
        )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ProviderConfig(provider={self.provider!r}, model={self.model!r}, "
            f"temperature={self.temperature}, use_streaming={self.use_streaming}, "
            f"gcp_project={self.gcp_project!r}, gcp_location={self.gcp_location!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None})"
        )

    __repr__ = __str__


def _parse_number(
    env: Mapping[str, str],
    name: str,
    parse: Callable[[str], N],
    default: N,
    accept: Callable[[N], bool],
) -> N:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = parse(raw.strip())
    except ValueError:
        logger.warning("Invalid %s value %r. Using default: %s", name, raw, default)
        return default
    if not accept(value):
        logger.warning("Invalid %s value %r. Using default: %s", name, raw, default)
        return default
    return value


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    logger.warning("Invalid %s value %r. Using default: %s", name, raw, default)
    return default


def _parse_timeout(env: Mapping[str, str]) -> float | None:
    raw = env.get("AI_REQUEST_TIMEOUT_S")
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        value = -1.0
    if value <= 0:
        logger.warning(
            "Invalid AI_REQUEST_TIMEOUT_S value %r. Requests will not time out.", raw
        )
        return None
    return value


def resolve_config(environ: Mapping[str, str] | None = None) -> ProviderConfig:
    """Resolve a ProviderConfig from *environ* (defaults to ``os.environ``).

    Malformed tunables fall back to their defaults with a warning. A missing
    credential for the selected provider raises ConfigurationError.
    """
    env: Mapping[str, str] = os.environ if environ is None else environ

    raw_provider = (env.get("AI_PROVIDER") or DEFAULT_PROVIDER).strip().lower()
    if raw_provider not in ("vertex", "gemini"):
        raise ConfigurationError(
            f"Unknown provider: {raw_provider!r}",
            hint="Set AI_PROVIDER to 'vertex' or 'gemini'.",
        )
    provider: ProviderName = "vertex" if raw_provider == "vertex" else "gemini"

    model = (env.get(_MODEL_ENV_VARS[provider]) or "").strip() or DEFAULT_MODEL_IDS[
        provider
    ]

    temperature = _parse_number(
        env, "AI_TEMPERATURE", float, DEFAULT_TEMPERATURE, lambda v: 0.0 <= v <= 2.0
    )
    use_streaming = _parse_bool(env, "AI_USE_STREAMING", DEFAULT_USE_STREAMING)
    max_output_tokens = _parse_number(
        env, "AI_MAX_OUTPUT_TOKENS", int, DEFAULT_MAX_OUTPUT_TOKENS, lambda v: v > 0
    )
    max_retries = _parse_number(
        env, "AI_MAX_RETRIES", int, DEFAULT_MAX_RETRIES, lambda v: v >= 0
    )
    retry_delay_ms = _parse_number(
        env, "AI_RETRY_DELAY_MS", int, DEFAULT_RETRY_DELAY_MS, lambda v: v >= 0
    )

    if provider == "vertex":
        credentials = {
            "gcp_project": (env.get("GOOGLE_CLOUD_PROJECT") or "").strip() or None,
            "gcp_location": (env.get("GOOGLE_CLOUD_LOCATION") or "").strip()
            or DEFAULT_GCP_LOCATION,
        }
    else:
        credentials = {"api_key": (env.get("GEMINI_API_KEY") or "").strip() or None}

    return ProviderConfig(
        provider=provider,
        model=model,
        temperature=temperature,
        use_streaming=use_streaming,
        max_output_tokens=max_output_tokens,
        max_retries=max_retries,
        retry_delay_ms=retry_delay_ms,
        request_timeout_s=_parse_timeout(env),
        retry_fatal_errors=_parse_bool(env, "AI_RETRY_FATAL_ERRORS", True),
        **credentials,
    )


def resolve_workspace_root(
    environ: Mapping[str, str] | None = None, override: str | None = None
) -> Path:
    """Return the absolute workspace root for filesystem tools."""
    env: Mapping[str, str] = os.environ if environ is None else environ
    raw = override or env.get("WORKSPACE_ROOT") or os.getcwd()
    root = Path(raw).expanduser().resolve()
    if not root.is_dir():
        raise ConfigurationError(
            f"Workspace root is not a directory: {root}",
            hint="Set WORKSPACE_ROOT or pass --workspace to an existing directory.",
        )
    return root
