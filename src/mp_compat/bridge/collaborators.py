"""Node.js-backed collaborators for the compatibility checker.

- ``NodeHostProvider`` answers host knowledge queries with the
  ``miniprogram-compat`` npm package.
- ``BabelTransformer`` runs ``@babel/preset-env`` with core-js usage
  injection and replays the observed injection sites to the observer.
- ``load_knowledge_base`` reads ``@mdn/browser-compat-data``'s ``data.json``.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mp_compat.bridge.node import NodeBridge
from mp_compat.config import MpCompatConfig
from mp_compat.errors import BridgeError, KnowledgeBaseError
from mp_compat.types import FeatureNode, InjectionSite, TransformOptions
from mp_compat.usage import InjectionObserver

COMPAT_DATA_PACKAGE = Path("@mdn") / "browser-compat-data" / "data.json"


def _bridge_from_config(config: MpCompatConfig) -> NodeBridge:
    return NodeBridge(config.node_executable, config.node_modules_dir)


class NodeHostProvider:
    """Host knowledge provider backed by ``miniprogram-compat``.

    Both queries for a version are answered by a single script run; the
    response is kept per version for the lifetime of the provider.
    """

    SCRIPT = "host_info.js"

    def __init__(self, bridge: NodeBridge) -> None:
        self.bridge = bridge
        self._responses: dict[str, dict[str, Any]] = {}

    @classmethod
    def from_config(cls, config: MpCompatConfig) -> "NodeHostProvider":
        return cls(_bridge_from_config(config))

    def _query(self, version: str) -> dict[str, Any]:
        if version not in self._responses:
            self._responses[version] = self.bridge.run(self.SCRIPT, {"version": version})
        return self._responses[version]

    def get_browsers_list(self, version: str) -> Sequence[str]:
        return self._query(version)["browsers"]

    def get_polyfill_info(self, version: str) -> Mapping[str, Any]:
        return self._query(version)["polyfillInfo"]


class BabelTransformer:
    """Polyfill transform backed by ``@babel/core`` and ``@babel/preset-env``."""

    SCRIPT = "transform.js"

    def __init__(self, bridge: NodeBridge) -> None:
        self.bridge = bridge

    @classmethod
    def from_config(cls, config: MpCompatConfig) -> "BabelTransformer":
        return cls(_bridge_from_config(config))

    def transform(self, code: str, options: TransformOptions, observer: InjectionObserver) -> None:
        """Transform ``code`` and report each injection site to ``observer``.

        Raises:
            BridgeError: If the transform fails (including syntax errors in ``code``)
                or reports malformed sites
        """
        response = self.bridge.run(
            self.SCRIPT,
            {
                "code": code,
                "options": {
                    "targets": options.targets,
                    "corejs": options.corejs,
                    "useBuiltIns": options.use_built_ins,
                },
            },
        )
        try:
            sites = [InjectionSite.model_validate(site) for site in response["sites"]]
        except (KeyError, TypeError, ValidationError) as e:
            raise BridgeError(f"Malformed transform response: {e}", script=self.SCRIPT) from e

        for site in sites:
            observer(site)


def resolve_compat_data_path(config: MpCompatConfig) -> Path:
    """Locate ``data.json`` from explicit path or node_modules directory.

    Raises:
        KnowledgeBaseError: If no location is configured or the file is missing
    """
    if config.compat_data_path is not None:
        path = config.compat_data_path
    elif config.node_modules_dir is not None:
        path = config.node_modules_dir / COMPAT_DATA_PACKAGE
    else:
        raise KnowledgeBaseError(
            "No compatibility data configured. Set MP_COMPAT_COMPAT_DATA_PATH "
            "or MP_COMPAT_NODE_MODULES_DIR"
        )

    if not path.is_file():
        raise KnowledgeBaseError(f"Compatibility data not found: {path}")
    return path


def load_knowledge_base(config: MpCompatConfig, section: str = "javascript") -> FeatureNode:
    """Load one section of the browser compatibility data as a node tree.

    Args:
        config: Settings locating the data file
        section: Top-level section to load

    Returns:
        Root FeatureNode of the section

    Raises:
        KnowledgeBaseError: If the file is missing, unreadable, or lacks the section
    """
    path = resolve_compat_data_path(config)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise KnowledgeBaseError(f"Cannot read compatibility data {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get(section), dict):
        raise KnowledgeBaseError(f"Compatibility data {path} has no '{section}' section")

    try:
        return FeatureNode.from_mapping(data[section])
    except ValidationError as e:
        raise KnowledgeBaseError(f"Malformed compatibility record in {path}: {e}") from e
