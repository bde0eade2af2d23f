"""Unit tests for injected polyfill extraction."""

import pytest
from pydantic import ValidationError

from mp_compat.types import InjectionSite, TransformOptions
from mp_compat.usage import PolyfillObserver, canonical_polyfill_id, extract_used_polyfills
from tests.conftest import FakeTransformer, injected


@pytest.mark.unit
class TestCanonicalPolyfillId:
    """Test module path reduction."""

    @pytest.mark.parametrize(
        "source,module_id",
        [
            ("core-js/modules/es.array.at.js", "array.at"),
            ("core-js/modules/esnext.global-this.js", "global-this"),
            ("core-js/modules/es.array.at", "array.at"),
            ("core-js/modules/web.dom-collections.iterator.js", "web.dom-collections.iterator"),
            ("/abs/node_modules/core-js/modules/es.string.pad-start.js", "string.pad-start"),
        ],
    )
    def test_core_js_paths(self, source: str, module_id: str) -> None:
        """Test core-js module paths become module ids."""
        assert canonical_polyfill_id(source) == module_id

    @pytest.mark.parametrize("source", ["regenerator-runtime/runtime.js", "core-js/stable", "lodash"])
    def test_other_paths(self, source: str) -> None:
        """Test non core-js module paths are rejected."""
        assert canonical_polyfill_id(source) is None


@pytest.mark.unit
class TestPolyfillObserver:
    """Test which injection sites are kept."""

    def test_direct_injection_kept(self) -> None:
        """Test directly injected require and import sites are collected."""
        observer = PolyfillObserver()
        observer(injected("es.array.at"))
        observer(injected("es.array.flat-map", kind="require"))

        assert observer.module_ids == {"array.at", "array.flat-map"}

    def test_nested_sites_skipped(self) -> None:
        """Test sites not tagged as directly inserted are ignored."""
        observer = PolyfillObserver()
        observer(injected("es.array.at", direct=False))

        assert observer.module_ids == set()

    def test_other_plugins_skipped(self) -> None:
        """Test sites seen by other plugins are ignored."""
        observer = PolyfillObserver()
        observer(injected("es.array.at", plugin="transform-modules-commonjs"))

        assert observer.module_ids == set()

    def test_non_literal_and_foreign_sources_skipped(self) -> None:
        """Test sites without a core-js literal path are ignored."""
        observer = PolyfillObserver()
        observer(InjectionSite(plugin="inject-polyfills", kind="require", direct=True))
        observer(
            InjectionSite(
                plugin="inject-polyfills",
                kind="import",
                source="regenerator-runtime/runtime.js",
                direct=True,
            )
        )

        assert observer.module_ids == set()


@pytest.mark.unit
class TestExtractUsedPolyfills:
    """Test one transform pass drives extraction."""

    def test_extract(self) -> None:
        """Test injected modules are collected and duplicates merged."""
        transformer = FakeTransformer(
            [injected("es.array.at"), injected("es.array.at"), injected("esnext.global-this")]
        )

        used = extract_used_polyfills("[1].at(-1); globalThis;", transformer)

        assert used == {"array.at", "global-this"}
        assert len(transformer.calls) == 1

    def test_default_baseline(self) -> None:
        """Test the oldest engine floor with usage injection is the default."""
        transformer = FakeTransformer()

        extract_used_polyfills("1;", transformer)

        code, options = transformer.calls[0]
        assert code == "1;"
        assert options.targets == ["iOS >= 8"]
        assert options.corejs == "3"
        assert options.use_built_ins == "usage"

    def test_custom_options(self) -> None:
        """Test explicit options reach the transformer."""
        transformer = FakeTransformer()
        options = TransformOptions(targets=["iOS >= 9"])

        extract_used_polyfills("1;", transformer, options)

        assert transformer.calls[0][1] is options

    def test_transform_errors_propagate(self) -> None:
        """Test transformer failures are not wrapped."""

        class BrokenTransformer(FakeTransformer):
            def transform(self, code, options, observer):
                raise SyntaxError("Unexpected token")

        with pytest.raises(SyntaxError, match="Unexpected token"):
            extract_used_polyfills("let =;", BrokenTransformer())

    def test_entry_mode_rejected(self) -> None:
        """Test only usage-based injection is accepted, since entry mode reports no sites."""
        with pytest.raises(ValidationError):
            TransformOptions(use_built_ins="entry")
