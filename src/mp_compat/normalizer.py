"""Feature key to polyfill module id normalization.

Compatibility data names features by path (``builtins.Array.flatMap``) while
core-js names polyfill modules in lowercase kebab case (``array.flat-map``).
The normalizer maps the former onto the latter so both sides can be joined.

Example:
    normalizer = FeatureNormalizer()
    normalizer.normalize("builtins.Array.flatMap")  # "array.flat-map"
    normalizer.normalize("builtins.Array.keys")  # "array.iterator" (alias)
"""

import re
from collections.abc import Mapping

from mp_compat.types import FeatureKey, ModuleId

# Features whose core-js module does not follow the derivation rules
DEFAULT_MODULE_ALIASES: dict[FeatureKey, ModuleId] = {
    "builtins.AggregateError.AggregateError": "aggregate-error",
    "builtins.Array.keys": "array.iterator",
    "builtins.Array.values": "array.iterator",
    "builtins.Array.entries": "array.iterator",
    "builtins.Error.Error.options_cause_parameter": "error.cause",
    "builtins.String.at": "string.at-alternative",
}

_BUILTINS_PREFIX = re.compile(r"^builtins\.")
_REGEXP_PREFIX = re.compile(r"^RegExp")
_SEGMENT_START_UPPER = re.compile(r"(?:^|\.)[A-Z]")
_INNER_UPPER = re.compile(r"[A-Z]")


class FeatureNormalizer:
    """Map feature keys to canonical polyfill module ids.

    Aliases take absolute precedence. Everything else is derived once and
    memoized, so repeated lookups are O(1) and always return the same id.

    The memo store is append-only and owned by the instance. Share one
    instance across sequential checks, not across threads.
    """

    def __init__(self, aliases: Mapping[FeatureKey, ModuleId] | None = None) -> None:
        """Initialize with the default alias table.

        Args:
            aliases: Extra aliases, overriding defaults on conflict
        """
        self.aliases: dict[FeatureKey, ModuleId] = dict(DEFAULT_MODULE_ALIASES)
        if aliases:
            self.aliases.update(aliases)
        self._cache: dict[FeatureKey, ModuleId] = {}

    def normalize(self, feature_key: FeatureKey) -> ModuleId:
        """Return the module id for a feature key."""
        if feature_key in self.aliases:
            return self.aliases[feature_key]
        if feature_key not in self._cache:
            self._cache[feature_key] = self._derive(feature_key)
        return self._cache[feature_key]

    __call__ = normalize

    @staticmethod
    def _derive(feature_key: FeatureKey) -> ModuleId:
        value = _BUILTINS_PREFIX.sub("", feature_key)
        value = _REGEXP_PREFIX.sub("regexp", value)
        value = _SEGMENT_START_UPPER.sub(lambda m: m.group(0).lower(), value)
        value = _INNER_UPPER.sub(lambda m: "-" + m.group(0).lower(), value)
        return value.replace("@", "")
