"""Build the support map of a host from browser compatibility data.

The support map answers, per polyfill module id, whether the host runs the
feature without the polyfill. A feature is supported when the host ships the
core-js module natively, or when every browser engine the host is equivalent
to added the feature at or below the host's version of that engine.

Traversal Rules:
    - Ignored feature families are pruned together with their subtrees
    - Only stable standard features (not experimental, standard track, not
      deprecated) enter the map; others are left out entirely
    - Children are always visited, whether or not the node has a record
"""

import re
from types import MappingProxyType

import structlog
from packaging.version import Version

from mp_compat.normalizer import FeatureNormalizer
from mp_compat.types import CompatRecord, FeatureKey, FeatureNode, HostProfile, ModuleId, SupportMap

logger = structlog.get_logger(__name__)

# Feature families that are never checked (matched against feature keys and module ids)
IGNORE_PATTERNS = [
    re.compile(r"^builtins\.Intl"),
    re.compile(r"^builtins\.WebAssembly"),
    re.compile(r"^web\.dom"),
    re.compile(r"^number\.constructor"),
    re.compile(r"^symbol\.description"),
]

# First run of up to three dot-separated numbers, as semver coercion does
_COERCE_PATTERN = re.compile(r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])")


def is_ignored(name: str) -> bool:
    """Return True if a feature key or module id belongs to an ignored family."""
    return any(pattern.search(name) for pattern in IGNORE_PATTERNS)


def coerce_version(value: str) -> Version | None:
    """Coerce a loose version string into ``<major>.<minor>.<patch>``.

    ``"10"`` becomes 10.0.0, ``"≤37"`` becomes 37.0.0 and ``"11.3.1 beta"``
    becomes 11.3.1. Missing components default to zero.

    Args:
        value: Version string from host knowledge or compatibility data

    Returns:
        Parsed version, or None if the string holds no number
    """
    match = _COERCE_PATTERN.search(value)
    if match is None:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return Version(f"{major}.{minor}.{patch}")


def _browser_supports(
    feature_key: FeatureKey, record: CompatRecord, browser: str, min_version: str
) -> bool:
    statement = record.statement_for(browser)
    if statement is None:
        logger.debug("browser_support_missing", feature_key=feature_key, browser=browser)
        return False

    version_added = statement.version_added
    if not version_added or not isinstance(version_added, str):
        return False

    added = coerce_version(version_added)
    host = coerce_version(min_version)
    if added is None or host is None:
        logger.debug(
            "version_uncoercible",
            feature_key=feature_key,
            browser=browser,
            version_added=version_added,
            host_version=min_version,
        )
        return False
    return added <= host


def is_feature_supported(
    feature_key: FeatureKey,
    record: CompatRecord,
    host: HostProfile,
    normalizer: FeatureNormalizer,
) -> bool:
    """Decide whether the host supports a feature without a polyfill.

    Native modules always win. Otherwise every tracked browser engine must
    have a support entry with a ``version_added`` at or below the host's
    version of that engine; a missing entry fails the whole feature.

    Args:
        feature_key: Dotted path of the feature
        record: Compatibility record of the feature
        host: Host profile to check against
        normalizer: Normalizer used to find the feature's module id

    Returns:
        True if the feature is supported on the host
    """
    if normalizer.normalize(feature_key) in host.native_modules:
        return True
    return all(
        _browser_supports(feature_key, record, browser, min_version)
        for browser, min_version in host.browsers.items()
    )


def build_support_map(
    knowledge_base: FeatureNode,
    host: HostProfile,
    normalizer: FeatureNormalizer,
) -> SupportMap:
    """Walk the knowledge base and compute support per module id.

    Args:
        knowledge_base: Root of the compatibility data (e.g. the ``javascript`` section)
        host: Host profile to check against
        normalizer: Normalizer mapping feature keys to module ids

    Returns:
        Read-only mapping of module id to support flag
    """
    support: dict[ModuleId, bool] = dict.fromkeys(host.native_modules, True)

    def visit(feature_key: FeatureKey, node: FeatureNode) -> None:
        if is_ignored(feature_key):
            return

        record = node.compat
        if record is not None and record.status is not None and record.status.is_stable_standard:
            support[normalizer.normalize(feature_key)] = is_feature_supported(
                feature_key, record, host, normalizer
            )

        for key, child in node.children.items():
            visit(f"{feature_key}.{key}" if feature_key else key, child)

    visit("", knowledge_base)

    logger.debug(
        "support_map_built",
        modules=len(support),
        unsupported=sum(1 for supported in support.values() if not supported),
    )
    return MappingProxyType(support)
