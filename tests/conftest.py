"""Pytest configuration and shared fixtures for mp-compat tests.

Provides fixtures for:
- Browser compatibility data fixture (small ``data.json``)
- Fake host knowledge provider
- Fake polyfill transformer replaying injection sites
- Normalizer and host profile instances
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from mp_compat.normalizer import FeatureNormalizer
from mp_compat.types import FeatureNode, HostProfile, InjectionSite, TransformOptions
from mp_compat.usage import InjectionObserver

# ============================================================================
# Fakes
# ============================================================================


class FakeHostProvider:
    """Host knowledge provider answering from in-memory data."""

    def __init__(self, browsers: Sequence[str], core_js_modules: Sequence[str]) -> None:
        self.browsers = list(browsers)
        self.core_js_modules = list(core_js_modules)
        self.calls: list[tuple[str, str]] = []

    def get_browsers_list(self, version: str) -> Sequence[str]:
        self.calls.append(("get_browsers_list", version))
        return self.browsers

    def get_polyfill_info(self, version: str) -> Mapping[str, Any]:
        self.calls.append(("get_polyfill_info", version))
        return {"coreJsModules": self.core_js_modules}


class FakeTransformer:
    """Polyfill transformer replaying a fixed list of injection sites."""

    def __init__(self, sites: Sequence[InjectionSite] = ()) -> None:
        self.sites = list(sites)
        self.calls: list[tuple[str, TransformOptions]] = []

    def transform(self, code: str, options: TransformOptions, observer: InjectionObserver) -> None:
        self.calls.append((code, options))
        for site in self.sites:
            observer(site)


def injected(module: str, **overrides: Any) -> InjectionSite:
    """Build a direct core-js injection site for ``core-js/modules/<module>.js``."""
    fields: dict[str, Any] = {
        "plugin": "inject-polyfills",
        "kind": "import",
        "source": f"core-js/modules/{module}.js",
        "direct": True,
    }
    fields.update(overrides)
    return InjectionSite(**fields)


# ============================================================================
# Fixture Paths
# ============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def compat_data_path(fixtures_dir: Path) -> Path:
    """Path to the browser compatibility data fixture."""
    return fixtures_dir / "compat" / "data.json"


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def knowledge_base(compat_data_path: Path) -> FeatureNode:
    """The ``javascript`` section of the compatibility data fixture."""
    with compat_data_path.open("r", encoding="utf-8") as f:
        return FeatureNode.from_mapping(json.load(f)["javascript"])


@pytest.fixture
def normalizer() -> FeatureNormalizer:
    """Fresh normalizer with the default alias table."""
    return FeatureNormalizer()


@pytest.fixture
def host_provider() -> FakeHostProvider:
    """Host equivalent to iOS 10.0.1 and Chrome 53 shipping two native modules."""
    return FakeHostProvider(
        browsers=["ios 10.0.1", "chrome 53"],
        core_js_modules=[
            "es.promise.any",
            "esnext.global-this",
            "web.dom-collections.iterator",
        ],
    )


@pytest.fixture
def host_profile() -> HostProfile:
    """Host profile matching ``host_provider``."""
    return HostProfile(
        browsers={"safari_ios": "10.0.1", "chrome": "53"},
        native_modules=frozenset({"promise.any", "global-this"}),
    )
