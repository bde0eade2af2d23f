"""Run bundled Node.js scripts with a JSON request/response protocol.

Each script reads one JSON document from stdin and writes one JSON document
to stdout. Packages are resolved through ``NODE_PATH`` when a node_modules
directory is configured, otherwise through Node's normal lookup.
"""

import json
import os
import subprocess
from pathlib import Path
from typing import Any

import structlog

from mp_compat.errors import BridgeError

logger = structlog.get_logger(__name__)

SCRIPTS_DIR = Path(__file__).parent / "scripts"


class NodeBridge:
    """Invoke bridge scripts through a Node.js executable."""

    def __init__(self, node_executable: str = "node", node_modules_dir: Path | None = None) -> None:
        self.node_executable = node_executable
        self.node_modules_dir = node_modules_dir

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.node_modules_dir is not None:
            paths = [str(self.node_modules_dir)]
            if env.get("NODE_PATH"):
                paths.append(env["NODE_PATH"])
            env["NODE_PATH"] = os.pathsep.join(paths)
        return env

    def run(self, script: str, payload: dict[str, Any]) -> Any:
        """Run a bridge script and return its decoded JSON output.

        Blocks until the script exits.

        Args:
            script: File name under the bundled scripts directory
            payload: JSON-serializable request written to stdin

        Returns:
            Decoded JSON response

        Raises:
            BridgeError: If Node is missing, the script fails, or its output is not JSON
        """
        cmd = [self.node_executable, str(SCRIPTS_DIR / script)]
        try:
            r = subprocess.run(
                cmd,
                input=json.dumps(payload),
                capture_output=True,
                text=True,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise BridgeError(
                f"Node executable not found: {self.node_executable}", script=script
            ) from e

        if r.returncode != 0:
            stderr = r.stderr.strip()
            logger.error(
                "bridge_script_failed",
                script=script,
                returncode=r.returncode,
                stderr=stderr[:500],
            )
            raise BridgeError(
                f"{script} failed with exit code {r.returncode}: {stderr or r.stdout.strip()}",
                script=script,
                stderr=stderr,
            )

        try:
            return json.loads(r.stdout)
        except json.JSONDecodeError as e:
            raise BridgeError(
                f"{script} returned invalid JSON: {e}", script=script, stderr=r.stderr
            ) from e
