"""
Docker Compose process supervisor.

Wraps the docker / docker compose CLI for the single managed server:
- query whether the container is running
- bring the stack up, stop, start, restart it
- pull newer images
- stream service logs

Every call blocks until the CLI exits. Failures raise SupervisorError; the
only exception is the running-state query, which fails closed.
"""
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional

from craftctl.core.errors import SupervisorError
from craftctl.core.logger import get_logger
from craftctl.core.models import ContainerStatus

logger = get_logger(__name__)

STATUS_FORMAT = "{{.Names}}\t{{.Status}}\t{{.Ports}}"


class ComposeSupervisor:
    """
    Runs docker compose actions for one project directory.

    Example:
        supervisor = ComposeSupervisor(Path("docker-compose.yml"), "minecraft-server")
        if not supervisor.is_running():
            supervisor.bring_up()
    """

    def __init__(
        self,
        compose_file: Path,
        container_name: str,
        timeout: int = 300,
        query_timeout: int = 30,
    ):
        """
        Args:
            compose_file: Compose definition driving the stack
            container_name: Name of the managed container
            timeout: Seconds allowed for compose actions (up, pull, stop...)
            query_timeout: Seconds allowed for `docker ps` queries
        """
        self.compose_file = Path(compose_file)
        self.container_name = container_name
        self.timeout = timeout
        self.query_timeout = query_timeout

    # Queries

    def is_running(self) -> bool:
        """Return True when a running container has exactly the managed name.

        Query errors are treated as "not running".
        """
        try:
            output = self._run_docker(
                ['ps', '--filter', f'name={self.container_name}', '--format', '{{.Names}}'],
                timeout=self.query_timeout,
            )
        except SupervisorError as e:
            logger.debug(f"Running-state query failed, assuming stopped: {e}")
            return False

        return self.container_name in output.splitlines()

    def list_status(self) -> List[ContainerStatus]:
        """Return `docker ps` rows (name, status, ports) for the managed container."""
        output = self._run_docker(
            ['ps', '--filter', f'name={self.container_name}', '--format', STATUS_FORMAT],
            timeout=self.query_timeout,
        )

        rows = []
        for line in output.splitlines():
            if not line.strip():
                continue
            parts = line.split('\t')
            parts += [''] * (3 - len(parts))
            rows.append(ContainerStatus(name=parts[0], status=parts[1], ports=parts[2]))
        return rows

    # Actions

    def bring_up(self) -> None:
        """docker compose up -d"""
        logger.info(f"Bringing up {self.compose_file}")
        self._run_compose(['up', '-d'])

    def stop(self) -> None:
        logger.info(f"Stopping {self.container_name}")
        self._run_compose(['stop'])

    def start(self) -> None:
        """Start existing (stopped) service containers without recreating them."""
        logger.info(f"Starting {self.container_name}")
        self._run_compose(['start'])

    def restart(self) -> None:
        logger.info(f"Restarting {self.container_name}")
        self._run_compose(['restart'])

    def pull(self) -> None:
        """Pull the latest images referenced by the compose file."""
        logger.info(f"Pulling images for {self.compose_file}")
        self._run_compose(['pull'])

    def stream_logs(self, service: str) -> Iterator[str]:
        """Follow service logs line by line.

        The docker process starts before this returns, so launch failures
        raise SupervisorError here. The returned generator never ends on its
        own; closing it terminates the docker process.
        """
        cmd = self._compose_cmd(['logs', '-f', service])
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                cwd=self.compose_file.parent,
            )
        except OSError as e:
            raise SupervisorError(f"Cannot run docker compose: {e}") from e

        return self._follow(process)

    def _follow(self, process: subprocess.Popen) -> Iterator[str]:
        try:
            for line in process.stdout:
                yield line.rstrip('\n')
        finally:
            if process.poll() is None:
                process.terminate()
                try:
                    process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    process.kill()
                    process.wait()
            process.stdout.close()

    # Command helpers

    def _compose_cmd(self, args: List[str]) -> List[str]:
        return ['docker', 'compose', '-f', str(self.compose_file)] + args

    def _run_compose(self, args: List[str]) -> str:
        return self._run(
            self._compose_cmd(args),
            timeout=self.timeout,
            cwd=self.compose_file.parent,
            label=f"docker compose {args[0]}",
        )

    def _run_docker(self, args: List[str], timeout: int) -> str:
        return self._run(['docker'] + args, timeout=timeout, label=f"docker {args[0]}")

    def _run(self, cmd: List[str], timeout: int, label: str, cwd: Optional[Path] = None) -> str:
        """Run a docker CLI command.

        Returns:
            Command stdout, stripped

        Raises:
            SupervisorError: On missing binary, non-zero exit, or timeout
        """
        logger.debug(f"Command: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=timeout,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            raise SupervisorError(
                "Docker is not installed",
                hint="Run: sudo craftctl install",
            ) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or '').strip() or f"exit status {e.returncode}"
            raise SupervisorError(f"'{label}' failed: {detail}") from e
        except subprocess.TimeoutExpired as e:
            raise SupervisorError(f"'{label}' timed out after {timeout}s") from e

        return result.stdout.strip()
