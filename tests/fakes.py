"""Test doubles for the supervisor, console channel and dependency manager."""
from collections import Counter

from craftctl.core.errors import ConsoleUnavailable, DependencyError
from craftctl.core.models import ContainerStatus, DependencyStatus


class FakeSupervisor:
    """In-memory stand-in for ComposeSupervisor that counts calls."""

    def __init__(self, running=False, comes_up=True):
        self.running = running
        self.comes_up = comes_up
        self.calls = Counter()
        self.log_lines = ["[Server thread/INFO]: Done (4.2s)!", "[Server thread/INFO]: Alice joined the game"]

    def is_running(self):
        self.calls["is_running"] += 1
        return self.running

    def list_status(self):
        self.calls["list_status"] += 1
        return [ContainerStatus(name="minecraft-server", status="Up 2 hours", ports="0.0.0.0:25565->25565/tcp")]

    def bring_up(self):
        self.calls["bring_up"] += 1
        self.running = self.comes_up

    def stop(self):
        self.calls["stop"] += 1
        self.running = False

    def start(self):
        self.calls["start"] += 1
        self.running = True

    def restart(self):
        self.calls["restart"] += 1

    def pull(self):
        self.calls["pull"] += 1

    def stream_logs(self, service):
        self.calls["stream_logs"] += 1
        return iter(self.log_lines)


class FakeConsole:
    """Console channel returning a canned response (or failing)."""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.sent = []

    def send(self, command):
        self.sent.append(command)
        if self.error:
            raise ConsoleUnavailable(self.error)
        return self.response


class FakeDependencies:
    def __init__(self, docker=True, compose=True, root=True):
        self.docker = docker
        self.compose = compose
        self.root = root
        self.installed = False

    def require_root(self):
        if not self.root:
            raise DependencyError("Installation requires root privileges", hint="Run with: sudo craftctl install")

    def check_all(self):
        return [
            DependencyStatus(name="Docker", installed=self.docker,
                             version="Docker version 27.0.3" if self.docker else None),
            DependencyStatus(name="Docker Compose", installed=self.compose,
                             version="v2.29.1" if self.compose else None),
        ]

    def install(self):
        self.installed = True
        return ["Added alex to docker group"]
