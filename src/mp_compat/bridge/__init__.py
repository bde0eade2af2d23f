"""Node.js bridge providing the default checker collaborators."""

from mp_compat.bridge.collaborators import (
    BabelTransformer,
    NodeHostProvider,
    load_knowledge_base,
    resolve_compat_data_path,
)
from mp_compat.bridge.node import NodeBridge

__all__ = [
    "BabelTransformer",
    "NodeBridge",
    "NodeHostProvider",
    "load_knowledge_base",
    "resolve_compat_data_path",
]
