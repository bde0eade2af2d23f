"""Resolve a miniprogram host version into a host profile.

The host knowledge provider describes a host version in two ways: the
browser engines it is equivalent to (browserslist tokens such as
``"ios 10.0"``) and the core-js modules it already ships. Both are
translated into knowledge base naming here.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import structlog

from mp_compat.errors import HostProfileError
from mp_compat.types import HostProfile

logger = structlog.get_logger(__name__)

# Host-reported engine names that differ from knowledge base naming
BROWSER_ALIASES: dict[str, str] = {
    "ios": "safari_ios",
}

# Standard-library families of core-js modules ("es.array.at", "esnext.array.at")
STANDARD_MODULE_PREFIX = re.compile(r"^es(next)?\.")


class HostKnowledgeProvider(Protocol):
    """Source of per-version host capability data."""

    def get_browsers_list(self, version: str) -> Sequence[str]:
        """Return ``"<engine> <version>"`` tokens for a host version."""
        ...

    def get_polyfill_info(self, version: str) -> Mapping[str, Any]:
        """Return polyfill info with a ``coreJsModules`` list for a host version."""
        ...


def strip_standard_prefix(module_name: str) -> str:
    """Remove a leading ``es.`` or ``esnext.`` family prefix."""
    return STANDARD_MODULE_PREFIX.sub("", module_name, count=1)


def parse_browsers(tokens: Sequence[str]) -> dict[str, str]:
    """Convert browserslist tokens into an engine to version mapping.

    Args:
        tokens: Tokens like ``"ios 10.0"``; split on the first space

    Returns:
        Mapping in knowledge base naming; later duplicates win

    Raises:
        HostProfileError: If a token has no version part
    """
    browsers: dict[str, str] = {}
    for token in tokens:
        browser, sep, version = token.partition(" ")
        if not sep:
            raise HostProfileError(f"Malformed browser token: {token!r}")
        browsers[BROWSER_ALIASES.get(browser, browser)] = version
    return browsers


def resolve_host(host_version: str, provider: HostKnowledgeProvider) -> HostProfile:
    """Build the host profile for a host version.

    Errors raised by the provider propagate unchanged.

    Args:
        host_version: Host version string understood by the provider
        provider: Host knowledge provider

    Returns:
        HostProfile with browser versions and native module ids

    Raises:
        HostProfileError: If a browser token or the polyfill info is malformed
    """
    browsers = parse_browsers(provider.get_browsers_list(host_version))

    polyfill_info = provider.get_polyfill_info(host_version)
    modules = polyfill_info.get("coreJsModules")
    if not isinstance(modules, (list, tuple)):
        raise HostProfileError(
            f"Polyfill info for host {host_version!r} has no coreJsModules list"
        )
    native_modules = frozenset(
        strip_standard_prefix(name) for name in modules if STANDARD_MODULE_PREFIX.match(name)
    )

    logger.debug(
        "host_resolved",
        host_version=host_version,
        browsers=browsers,
        native_module_count=len(native_modules),
    )
    return HostProfile(browsers=browsers, native_modules=native_modules)
