"""Exceptions raised by the compatibility checker.

Only ``UnsupportedFeatureError`` belongs to the compatibility decision itself.
The remaining errors describe broken inputs from the collaborators (host
knowledge, compatibility data, Node bridge) and are fatal configuration errors.

Unknown features are not exceptions: they are logged and the check continues.
"""


class CompatError(Exception):
    """Base class for all mp-compat errors."""

    pass


class UnsupportedFeatureError(CompatError):
    """Raised when a polyfilled feature is not supported by the host.

    The source cannot run on the host unmodified. The check stops at the
    first unsupported feature it meets.

    Example:
        >>> try:
        ...     check_miniprogram_compat("[1, 2].at(-1);", "2.10.0")
        ... except UnsupportedFeatureError as e:
        ...     print(e.module_id)
        array.at
    """

    def __init__(self, module_id: str):
        """Initialize with the offending module id.

        Args:
            module_id: Canonical polyfill module id (e.g. ``array.at``)
        """
        super().__init__(f"{module_id} unsupported")
        self.module_id = module_id


class HostProfileError(CompatError):
    """Raised when host knowledge cannot be turned into a host profile."""

    pass


class KnowledgeBaseError(CompatError):
    """Raised when browser compatibility data is missing or malformed."""

    pass


class BridgeError(CompatError):
    """Raised when a Node.js bridge script fails."""

    def __init__(self, message: str, script: str, stderr: str = ""):
        """Initialize with message and script diagnostics.

        Args:
            message: Human-readable error summary
            script: Name of the bridge script that failed
            stderr: Captured standard error of the Node process
        """
        super().__init__(message)
        self.script = script
        self.stderr = stderr
