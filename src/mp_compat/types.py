"""Type definitions for mp-compat.

Compatibility data and host knowledge arrive as untyped JSON from external
collaborators. They are converted to Pydantic v2 models at the boundary so
the resolution algorithm works on typed objects.

Key Models:
    CompatStatus: Standardization status of a feature
    SupportStatement: Per-browser support entry (``version_added``)
    CompatRecord: The ``__compat`` record of a knowledge base node
    FeatureNode: Knowledge base tree node (record plus children)
    HostProfile: Effective browser versions and native polyfill modules of a host
    InjectionSite: One polyfill injection site observed during a transform
    TransformOptions: Baseline settings for the polyfill transform
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Key marking the compatibility record inside a knowledge base node
COMPAT_MARKER = "__compat"

# Canonical polyfill module identifier, e.g. "array.iterator"
ModuleId = str

# Dotted path into the knowledge base, e.g. "builtins.Array.keys"
FeatureKey = str

SupportMap = Mapping[ModuleId, bool]


class CompatStatus(BaseModel):
    """Standardization status flags of a feature."""

    model_config = ConfigDict(extra="ignore")

    experimental: bool | None = None
    standard_track: bool | None = None
    deprecated: bool | None = None

    @property
    def is_stable_standard(self) -> bool:
        """True only for non-experimental, standard-track, non-deprecated features."""
        return (
            self.experimental is False
            and self.standard_track is True
            and self.deprecated is False
        )


class SupportStatement(BaseModel):
    """Support information for one browser.

    ``version_added`` is normally a version string, but compatibility data
    also uses ``true``/``false``/``null`` and ranges such as ``"≤37"``.
    """

    model_config = ConfigDict(extra="ignore")

    version_added: str | bool | None = None


class CompatRecord(BaseModel):
    """Compatibility record attached to a knowledge base node."""

    model_config = ConfigDict(extra="ignore")

    status: CompatStatus | None = None
    support: dict[str, SupportStatement | list[SupportStatement]] = Field(default_factory=dict)

    def statement_for(self, browser: str) -> SupportStatement | None:
        """Return the authoritative support statement for a browser.

        When the entry is an ordered list of historical statements, the first
        one wins even if a later one is more favourable.

        Args:
            browser: Browser name in knowledge base naming (e.g. ``safari_ios``)

        Returns:
            Support statement, or None if the browser has no entry
        """
        entry = self.support.get(browser)
        if isinstance(entry, list):
            return entry[0] if entry else None
        return entry


@dataclass
class FeatureNode:
    """Node of the compatibility knowledge base.

    A node optionally carries a compatibility record and always has a
    (possibly empty) mapping of child segment to child node. A node can have
    both: ``builtins.Array`` has its own record and nested sub-features.

    Attributes:
        compat: Compatibility record, if this node describes a feature
        children: Child nodes keyed by path segment
    """

    compat: CompatRecord | None = None
    children: dict[str, "FeatureNode"] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FeatureNode":
        """Build a node tree from raw compatibility JSON.

        Args:
            data: Raw node mapping (e.g. the ``javascript`` section of the data)

        Returns:
            Root FeatureNode of the converted tree
        """
        compat = data.get(COMPAT_MARKER)
        return cls(
            compat=CompatRecord.model_validate(compat) if compat is not None else None,
            children={
                key: cls.from_mapping(value)
                for key, value in data.items()
                if key != COMPAT_MARKER and isinstance(value, Mapping)
            },
        )


class HostProfile(BaseModel):
    """Capabilities of a miniprogram host version.

    Attributes:
        browsers: Browser engine (knowledge base naming) to minimum version
        native_modules: Polyfill module ids the host already provides
    """

    model_config = ConfigDict(frozen=True)

    browsers: dict[str, str] = Field(default_factory=dict)
    native_modules: frozenset[ModuleId] = Field(default_factory=frozenset)


class InjectionSite(BaseModel):
    """A polyfill import/require site observed during a transform.

    Attributes:
        plugin: Alias of the transform plugin whose visitor saw the site
        kind: Statement form of the site
        source: Literal module path argument, if it is a string literal
        direct: True when the injection stage tagged the statement as
            directly inserted rather than nested inside other injected code
    """

    plugin: str
    kind: Literal["require", "import"]
    source: str | None = None
    direct: bool = False


class TransformOptions(BaseModel):
    """Baseline settings for the polyfill injection transform.

    Defaults target the oldest supported engine floor so that every polyfill
    a host could possibly need gets injected.
    """

    targets: list[str] = Field(default_factory=lambda: ["iOS >= 8"])
    corejs: str = "3"
    use_built_ins: Literal["usage"] = "usage"
