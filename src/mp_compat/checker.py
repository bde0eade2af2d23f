"""Check whether source code runs unmodified on a miniprogram host.

The checker joins two sets keyed by polyfill module id: the polyfills a
transform pass injects into the source for the oldest supported baseline,
and the support map of the host. Every injected polyfill must be supported
by the host, otherwise the source needs the polyfill to run.

Outcomes per injected module id:
    - Ignored family: skipped
    - Not in the support map: logged as unknown, check continues
    - Mapped to False: ``UnsupportedFeatureError`` raised immediately
    - Mapped to True: fine

Unknown features are only logged. Callers cannot tell "fully compatible"
apart from "compatible except for features the data does not know".
"""

import structlog

from mp_compat.bridge import BabelTransformer, NodeHostProvider, load_knowledge_base
from mp_compat.config import MpCompatConfig
from mp_compat.errors import UnsupportedFeatureError
from mp_compat.host import HostKnowledgeProvider, resolve_host
from mp_compat.normalizer import FeatureNormalizer
from mp_compat.support import build_support_map, is_ignored
from mp_compat.types import FeatureNode, ModuleId, SupportMap, TransformOptions
from mp_compat.usage import PolyfillTransformer, extract_used_polyfills

logger = structlog.get_logger(__name__)


class CompatibilityChecker:
    """Reconcile injected polyfills against a host's support map.

    Attributes:
        host_provider: Source of host browser versions and native modules
        transformer: Polyfill injection transform
        knowledge_base: Root of the browser compatibility data
        normalizer: Feature key to module id normalizer
        transform_options: Baseline options for the transform pass
    """

    def __init__(
        self,
        host_provider: HostKnowledgeProvider,
        transformer: PolyfillTransformer,
        knowledge_base: FeatureNode,
        normalizer: FeatureNormalizer | None = None,
        transform_options: TransformOptions | None = None,
    ) -> None:
        self.host_provider = host_provider
        self.transformer = transformer
        self.knowledge_base = knowledge_base
        self.normalizer = normalizer or FeatureNormalizer()
        self.transform_options = transform_options or TransformOptions()

    def support_map(self, host_version: str) -> SupportMap:
        """Build the support map for a host version."""
        host = resolve_host(host_version, self.host_provider)
        return build_support_map(self.knowledge_base, host, self.normalizer)

    def used_polyfills(self, source_code: str) -> set[ModuleId]:
        """Collect the polyfill module ids injected into the source."""
        return extract_used_polyfills(source_code, self.transformer, self.transform_options)

    def check(self, source_code: str, host_version: str) -> None:
        """Verify the source runs on the host without polyfills.

        Args:
            source_code: Full source text to analyze
            host_version: Host version string understood by the host provider

        Raises:
            UnsupportedFeatureError: On the first injected polyfill the host
                does not support
        """
        support = self.support_map(host_version)
        used = self.used_polyfills(source_code)

        for module_id in used:
            if is_ignored(module_id):
                continue

            if module_id not in support:
                logger.warning("feature_unknown", module_id=module_id, host_version=host_version)
                continue

            if not support[module_id]:
                logger.info("feature_unsupported", module_id=module_id, host_version=host_version)
                raise UnsupportedFeatureError(module_id)


def check_miniprogram_compat(
    code: str,
    version: str,
    *,
    host_provider: HostKnowledgeProvider | None = None,
    transformer: PolyfillTransformer | None = None,
    knowledge_base: FeatureNode | None = None,
    config: MpCompatConfig | None = None,
) -> None:
    """Check that ``code`` runs unmodified on miniprogram host ``version``.

    Collaborators that are not passed in are built from ``config`` using the
    Node.js bridge (``miniprogram-compat``, Babel, browser-compat-data).

    Args:
        code: Full source text to analyze
        version: Miniprogram host version (e.g. ``"2.10.0"``)
        host_provider: Host knowledge provider override
        transformer: Polyfill transform override
        knowledge_base: Compatibility data override
        config: Settings (defaults to ``MpCompatConfig()``)

    Raises:
        UnsupportedFeatureError: If the source uses a feature the host lacks
    """
    config = config or MpCompatConfig()

    if host_provider is None:
        host_provider = NodeHostProvider.from_config(config)
    if transformer is None:
        transformer = BabelTransformer.from_config(config)
    if knowledge_base is None:
        knowledge_base = load_knowledge_base(config)

    checker = CompatibilityChecker(
        host_provider,
        transformer,
        knowledge_base,
        transform_options=config.transform_options(),
    )
    checker.check(code, version)
