"""Platform adapter contract.

An AdapterConfig is everything the executor needs to know about one ad
platform: where it lives, how it authenticates, how success is decided and
how failures are classified. It is built once per platform and shared by
every call; per-call state lives on the RequestDescriptor.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Set
from urllib.parse import parse_qsl, quote, unquote_plus, urlsplit, urlunsplit

import httpx

from adbridge.config.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from adbridge.core.errors.integration import ClassifiedError

SuccessPredicate = Callable[[httpx.Response, Any], bool]
ErrorParser = Callable[[httpx.Response, Any], ClassifiedError]
AuthHeaderUpdater = Callable[[Mapping[str, str], str], Dict[str, str]]
AuthUrlUpdater = Callable[[str, str], str]

TOKEN_QUERY_PARAMS = ("access_token", "token")


def default_is_success(response: httpx.Response, payload: Any) -> bool:
    """HTTP 2xx means success."""
    return response.is_success


def header_auth_updater(name: str, prefix: str = "") -> AuthHeaderUpdater:
    """Build an updater that stores the credential in header *name*.

    Any existing header with the same name (in any casing) is replaced.
    """

    def update(headers: Mapping[str, str], token: str) -> Dict[str, str]:
        updated = {k: v for k, v in headers.items() if k.lower() != name.lower()}
        updated[name] = f"{prefix}{token}"
        return updated

    return update


bearer_auth_header = header_auth_updater("Authorization", "Bearer ")


def query_param_names(url: str) -> Set[str]:
    """Return the decoded names of the query parameters in *url*."""
    return {key for key, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True)}


def rewrite_query_values(url: str, values: Mapping[str, str]) -> str:
    """Set the value of each parameter in *values* that *url* already carries.

    Only the matching ``key=value`` pairs are rewritten; every other pair
    keeps its original encoding. Unmatched names are not added.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    changed = False
    pairs = []
    for pair in parts.query.split("&"):
        raw_key = pair.split("=", 1)[0]
        key = unquote_plus(raw_key)
        if key in values:
            pair = f"{raw_key}={quote(values[key], safe='')}"
            changed = True
        pairs.append(pair)
    if not changed:
        return url
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, "&".join(pairs), parts.fragment)
    )


def replace_token_params(
    url: str,
    token: str,
    names: Iterable[str] = TOKEN_QUERY_PARAMS,
) -> str:
    """Swap the value of credential query parameters already present in *url*.

    URLs without any of *names* are returned unchanged.
    """
    return rewrite_query_values(url, {name: token for name in names})


@dataclass(frozen=True)
class AdapterConfig:
    """Per-platform configuration consumed by the request executor.

    Attributes:
        platform_id: Stable platform id (``meta``, ``google``, ...)
        base_url: Prefix for relative request URLs
        parse_error: Turns a failed response into a ClassifiedError
        default_headers: Headers sent on every call (read-only)
        retry_config: Retry policy for this platform
        is_success: Success predicate; not always equivalent to HTTP 2xx
        update_auth_header: Applies a refreshed credential to headers
        update_auth_in_url: Applies a refreshed credential to the URL
    """

    platform_id: str
    base_url: str
    parse_error: ErrorParser
    default_headers: Mapping[str, str] = field(default_factory=dict)
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG
    is_success: SuccessPredicate = default_is_success
    update_auth_header: AuthHeaderUpdater = bearer_auth_header
    update_auth_in_url: AuthUrlUpdater = replace_token_params

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "default_headers", MappingProxyType(dict(self.default_headers))
        )

    def resolve_url(self, url: str) -> str:
        """Join a relative *url* onto ``base_url``; absolute URLs pass through."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url.rstrip('/')}/{url.lstrip('/')}"

    def with_retry_config(self, retry_config: RetryConfig) -> "AdapterConfig":
        """Return a copy of this adapter using *retry_config*."""
        return replace(self, retry_config=retry_config)
