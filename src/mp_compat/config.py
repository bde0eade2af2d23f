"""Configuration management for mp-compat.

Provides environment-based configuration using Pydantic Settings.
All settings can be overridden via environment variables with MP_COMPAT_ prefix.

Example:
    export MP_COMPAT_NODE_MODULES_DIR=/opt/toolchain/node_modules
    export MP_COMPAT_COMPAT_DATA_PATH=/data/browser-compat-data/data.json
    export MP_COMPAT_LOG_LEVEL=DEBUG
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mp_compat.types import TransformOptions


class MpCompatConfig(BaseSettings):
    """Configuration settings for mp-compat.

    Loads settings from environment variables (MP_COMPAT_ prefix) and .env file.
    Settings cascade: .env file < environment variables < explicit overrides.

    Configuration Groups:
        Node: Executable and module resolution for the bridge scripts
        Data: Location of browser compatibility data
        Transform: Baseline targets and core-js version for polyfill injection
        Logging: Level and output format
    """

    model_config = SettingsConfigDict(
        env_prefix="MP_COMPAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Node Configuration
    node_executable: str = Field(default="node", description="Node.js executable")
    node_modules_dir: Path | None = Field(
        default=None,
        description="node_modules directory holding babel, core-js and miniprogram-compat",
    )

    # Data Configuration
    compat_data_path: Path | None = Field(
        default=None,
        description="Path to @mdn/browser-compat-data data.json",
    )

    # Transform Configuration
    baseline_targets: list[str] = Field(
        default_factory=lambda: ["iOS >= 8"],
        description="Browserslist queries for the oldest supported engine floor",
    )
    corejs_version: str = Field(default="3", description="core-js major version")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (json or console)")

    def transform_options(self) -> TransformOptions:
        """Return baseline transform options for usage extraction."""
        return TransformOptions(targets=self.baseline_targets, corejs=self.corejs_version)
