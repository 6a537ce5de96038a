"""Shared test fixtures for craftctl tests."""
import pytest

from craftctl.core.config import ControllerConfig, set_config
from craftctl.core.controller import LifecycleController
from craftctl.core.logger import close_file_logging

from fakes import FakeConsole, FakeDependencies, FakeSupervisor


@pytest.fixture(autouse=True)
def reset_global_config():
    """Keep the cached global config from leaking between tests."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture(autouse=True)
def detach_log_file():
    """Drop any file handler a CLI test installed with --log-file."""
    yield
    close_file_logging()


@pytest.fixture
def project_dir(tmp_path):
    """Project directory with a compose file and a small data directory."""
    (tmp_path / "docker-compose.yml").write_text(
        "services:\n  minecraft:\n    image: itzg/minecraft-server\n    container_name: minecraft-server\n"
    )
    data = tmp_path / "data"
    (data / "world").mkdir(parents=True)
    (data / "world" / "level.dat").write_bytes(b"\x0a\x00\x00")
    (data / "server.properties").write_text("enable-rcon=true\n")
    return tmp_path


@pytest.fixture
def config(project_dir):
    return ControllerConfig(project_dir=project_dir)


@pytest.fixture
def supervisor():
    return FakeSupervisor()


@pytest.fixture
def console():
    return FakeConsole(response="There are 0 of a max of 20 players online: ")


@pytest.fixture
def dependencies():
    return FakeDependencies()


@pytest.fixture
def controller(config, supervisor, console, dependencies):
    return LifecycleController(
        config,
        supervisor=supervisor,
        console=console,
        dependencies=dependencies,
    )
