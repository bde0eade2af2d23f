"""mp-compat - Check JavaScript source against miniprogram host capabilities."""

from mp_compat.checker import CompatibilityChecker, check_miniprogram_compat
from mp_compat.errors import CompatError, UnsupportedFeatureError
from mp_compat.normalizer import FeatureNormalizer

# Version (managed in pyproject.toml)
__version__ = "0.1.0"

__all__ = [
    "CompatError",
    "CompatibilityChecker",
    "FeatureNormalizer",
    "UnsupportedFeatureError",
    "__version__",
    "check_miniprogram_compat",
]
