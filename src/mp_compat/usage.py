"""Extract the polyfills a transform pass injects into source code.

The transform collaborator compiles the source for a fixed baseline with
core-js usage-based injection enabled and reports every import/require site
its plugin visitors see. ``PolyfillObserver`` keeps only the sites the
injection stage itself inserted and turns their module paths into module ids.

Example:
    observer = PolyfillObserver()
    observer(InjectionSite(
        plugin="inject-polyfills",
        kind="import",
        source="core-js/modules/es.array.at.js",
        direct=True,
    ))
    observer.module_ids  # {"array.at"}
"""

from collections.abc import Callable
from typing import Protocol

import structlog

from mp_compat.host import strip_standard_prefix
from mp_compat.types import InjectionSite, ModuleId, TransformOptions

logger = structlog.get_logger(__name__)

# Visitor plugin alias of the polyfill injection stage
INJECTION_PLUGIN = "inject-polyfills"

# Path segment identifying standard-library polyfill modules
POLYFILL_PATH_MARKER = "core-js/modules/"

InjectionObserver = Callable[[InjectionSite], None]


class PolyfillTransformer(Protocol):
    """Synchronous source transform with an injection observer hook."""

    def transform(self, code: str, options: TransformOptions, observer: InjectionObserver) -> None:
        """Transform ``code``, calling ``observer`` once per injection site."""
        ...


def canonical_polyfill_id(source: str) -> ModuleId | None:
    """Reduce a polyfill module path to its module id.

    ``"core-js/modules/es.array.at.js"`` becomes ``"array.at"``.

    Args:
        source: Module path argument of an injected import/require

    Returns:
        Module id, or None if the path is not a core-js module path
    """
    if POLYFILL_PATH_MARKER not in source:
        return None
    module_name = source.split(POLYFILL_PATH_MARKER, 1)[1].removesuffix(".js")
    return strip_standard_prefix(module_name)


class PolyfillObserver:
    """Injection observer accumulating injected polyfill module ids."""

    def __init__(self) -> None:
        self.module_ids: set[ModuleId] = set()

    def __call__(self, site: InjectionSite) -> None:
        if site.plugin != INJECTION_PLUGIN or not site.direct or not site.source:
            return
        module_id = canonical_polyfill_id(site.source)
        if module_id:
            self.module_ids.add(module_id)


def extract_used_polyfills(
    source_code: str,
    transformer: PolyfillTransformer,
    options: TransformOptions | None = None,
) -> set[ModuleId]:
    """Run one transform pass and collect the injected polyfill module ids.

    Transform errors (syntax errors, missing toolchain) propagate unchanged.

    Args:
        source_code: Full source text to analyze
        transformer: Transform collaborator
        options: Baseline transform options (defaults to ``TransformOptions()``)

    Returns:
        Set of module ids injected for the source
    """
    observer = PolyfillObserver()
    transformer.transform(source_code, options or TransformOptions(), observer)

    logger.debug("polyfills_extracted", module_ids=sorted(observer.module_ids))
    return observer.module_ids
