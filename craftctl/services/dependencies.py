"""Host dependency detection and installation (Docker Engine + Compose plugin).

Installation follows Docker's apt repository procedure for Debian/Ubuntu:
prerequisite packages, the Docker GPG key, the apt source, then docker-ce
with the compose plugin. Other distributions are not handled.
"""
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

import requests

from craftctl.core.errors import DependencyError
from craftctl.core.logger import get_logger
from craftctl.core.models import DependencyStatus

logger = get_logger(__name__)

DOCKER_GPG_URL = "https://download.docker.com/linux/ubuntu/gpg"
DOCKER_APT_REPO = "https://download.docker.com/linux/ubuntu"
KEYRING_PATH = Path("/usr/share/keyrings/docker-archive-keyring.gpg")
SOURCES_LIST_PATH = Path("/etc/apt/sources.list.d/docker.list")

PREREQUISITE_PACKAGES = [
    'apt-transport-https', 'ca-certificates', 'curl', 'software-properties-common',
]
DOCKER_PACKAGES = [
    'docker-ce', 'docker-ce-cli', 'containerd.io', 'docker-compose-plugin',
]


class DependencyManager:
    """Checks for and installs Docker and Docker Compose."""

    def __init__(self, timeout: int = 600, check_timeout: int = 10):
        self.timeout = timeout
        self.check_timeout = check_timeout

    # Detection

    def check_docker(self) -> DependencyStatus:
        if shutil.which('docker') is None:
            return DependencyStatus(name='Docker', installed=False)
        version = self._probe(['docker', '--version'])
        return DependencyStatus(name='Docker', installed=version is not None, version=version)

    def check_compose(self) -> DependencyStatus:
        if shutil.which('docker') is None:
            return DependencyStatus(name='Docker Compose', installed=False)
        version = self._probe(['docker', 'compose', 'version'])
        return DependencyStatus(name='Docker Compose', installed=version is not None, version=version)

    def check_all(self) -> List[DependencyStatus]:
        return [self.check_docker(), self.check_compose()]

    def _probe(self, cmd: List[str]) -> Optional[str]:
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.check_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"{' '.join(cmd)} failed: {e}")
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    # Installation

    def require_root(self) -> None:
        if os.geteuid() != 0:
            raise DependencyError(
                "Installation requires root privileges",
                hint="Run with: sudo craftctl install",
            )

    def install(self) -> List[str]:
        """Install Docker Engine and the Compose plugin through apt.

        Returns:
            Follow-up notes for the operator

        Raises:
            DependencyError: When not root or any installation step fails
        """
        self.require_root()

        notes = []
        logger.info("Installing Docker...")

        self._run(['apt', 'update'])
        self._run(['apt', 'install', '-y'] + PREREQUISITE_PACKAGES)
        self._install_gpg_key()
        self._write_apt_source()
        self._run(['apt', 'update'])
        self._run(['apt', 'install', '-y'] + DOCKER_PACKAGES)

        sudo_user = os.environ.get('SUDO_USER')
        if sudo_user:
            self._run(['usermod', '-aG', 'docker', sudo_user])
            notes.append(f"Added {sudo_user} to docker group")
            notes.append("Log out and back in for group changes to take effect")

        self._run(['systemctl', 'start', 'docker'])
        self._run(['systemctl', 'enable', 'docker'])

        logger.info("✓ Docker installed")
        return notes

    def _install_gpg_key(self) -> None:
        """Download Docker's signing key and store it dearmored in the keyring."""
        logger.debug(f"Downloading Docker GPG key from {DOCKER_GPG_URL}")
        try:
            response = requests.get(DOCKER_GPG_URL, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DependencyError(f"Failed to download Docker GPG key: {e}") from e

        KEYRING_PATH.parent.mkdir(parents=True, exist_ok=True)
        self._run(
            ['gpg', '--batch', '--yes', '--dearmor', '-o', str(KEYRING_PATH)],
            input=response.content,
            text=False,
        )

    def _write_apt_source(self) -> None:
        arch = self._run(['dpkg', '--print-architecture']).strip()
        codename = self._run(['lsb_release', '-cs']).strip()
        line = (
            f"deb [arch={arch} signed-by={KEYRING_PATH}] "
            f"{DOCKER_APT_REPO} {codename} stable\n"
        )
        SOURCES_LIST_PATH.parent.mkdir(parents=True, exist_ok=True)
        SOURCES_LIST_PATH.write_text(line)
        logger.debug(f"Wrote {SOURCES_LIST_PATH}: {line.strip()}")

    def _run(self, cmd: List[str], input=None, text: bool = True) -> str:
        logger.debug(f"Command: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                check=True,
                timeout=self.timeout,
                input=input,
                text=text,
            )
        except FileNotFoundError as e:
            raise DependencyError(f"Required tool not found: {cmd[0]}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors='replace') if isinstance(e.stderr, bytes) else e.stderr
            raise DependencyError(
                f"'{' '.join(cmd[:2])}' failed: {(stderr or '').strip() or e.returncode}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DependencyError(f"'{' '.join(cmd[:2])}' timed out after {self.timeout}s") from e

        if isinstance(result.stdout, bytes):
            return result.stdout.decode(errors='replace')
        return result.stdout
