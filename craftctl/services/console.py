"""Remote-console channel through the RCON client bundled in the server image."""
import subprocess
from typing import List

from craftctl.core.errors import ConsoleUnavailable
from craftctl.core.logger import get_logger

logger = get_logger(__name__)


class RconConsole:
    """Sends one console command via `docker exec <container> rcon-cli <command>`.

    The command string is passed as a single argv token, so spaces and
    quotes reach the server unchanged.
    """

    def __init__(self, container_name: str, client: str = "rcon-cli", timeout: int = 10):
        self.container_name = container_name
        self.client = client
        self.timeout = timeout

    def build_command(self, command: str) -> List[str]:
        return ['docker', 'exec', self.container_name, self.client, command]

    def send(self, command: str) -> str:
        """Send one command and return the server's response text.

        Raises:
            ConsoleUnavailable: If the client fails, is missing, or exceeds the timeout
        """
        cmd = self.build_command(command)
        logger.debug(f"Console command for {self.container_name}: {command!r}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ConsoleUnavailable(
                "Docker is not installed",
                hint="Run: sudo craftctl install",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ConsoleUnavailable(
                f"Console did not respond within {self.timeout}s",
                hint="Is RCON enabled in the server configuration?",
            ) from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or '').strip()
            logger.debug(f"{self.client} exited with {result.returncode}: {detail}")
            raise ConsoleUnavailable(
                "Failed to connect to server console"
                + (f": {detail}" if detail else ""),
                hint="Is RCON enabled in the server configuration?",
            )

        return result.stdout.strip()
