"""Tests for the Docker Compose supervisor (subprocess calls mocked)."""
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from craftctl.core.errors import SupervisorError
from craftctl.services.docker_compose import ComposeSupervisor


def completed(stdout="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


@pytest.fixture
def supervisor(tmp_path):
    return ComposeSupervisor(tmp_path / "docker-compose.yml", "minecraft-server", timeout=60)


class TestIsRunning:
    def test_exact_name_match(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed("minecraft-server\n")) as mock_run:
            assert supervisor.is_running() is True

        cmd = mock_run.call_args[0][0]
        assert cmd == ['docker', 'ps', '--filter', 'name=minecraft-server', '--format', '{{.Names}}']

    def test_substring_name_is_not_running(self, supervisor):
        """docker's name filter matches substrings; only the exact name counts."""
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed("minecraft-server-old\n")):
            assert supervisor.is_running() is False

    def test_empty_output(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed("")):
            assert supervisor.is_running() is False

    def test_docker_missing_fails_closed(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   side_effect=FileNotFoundError("docker")):
            assert supervisor.is_running() is False

    def test_daemon_error_fails_closed(self, supervisor):
        error = subprocess.CalledProcessError(1, ['docker', 'ps'], stderr="Cannot connect to the Docker daemon")
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run", side_effect=error):
            assert supervisor.is_running() is False

    def test_timeout_fails_closed(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(['docker', 'ps'], 30)):
            assert supervisor.is_running() is False


class TestListStatus:
    def test_parses_rows(self, supervisor):
        output = "minecraft-server\tUp 3 hours (healthy)\t0.0.0.0:25565->25565/tcp, :::25565->25565/tcp\n"
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed(output)):
            rows = supervisor.list_status()

        assert len(rows) == 1
        assert rows[0].name == "minecraft-server"
        assert rows[0].status == "Up 3 hours (healthy)"
        assert rows[0].ports.startswith("0.0.0.0:25565")

    def test_row_without_ports(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed("minecraft-server\tUp 5 seconds")):
            rows = supervisor.list_status()

        assert rows[0].ports == ""


class TestActions:
    @pytest.mark.parametrize(
        "method, expected",
        [
            ("bring_up", ['up', '-d']),
            ("stop", ['stop']),
            ("start", ['start']),
            ("restart", ['restart']),
            ("pull", ['pull']),
        ],
    )
    def test_compose_commands(self, supervisor, method, expected):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   return_value=completed()) as mock_run:
            getattr(supervisor, method)()

        cmd = mock_run.call_args[0][0]
        assert cmd == ['docker', 'compose', '-f', str(supervisor.compose_file)] + expected
        assert mock_run.call_args[1]['timeout'] == 60
        assert mock_run.call_args[1]['cwd'] == supervisor.compose_file.parent

    def test_failure_raises(self, supervisor):
        error = subprocess.CalledProcessError(1, [], stderr="no such service: minecraft")
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run", side_effect=error):
            with pytest.raises(SupervisorError) as exc_info:
                supervisor.bring_up()

        assert "docker compose up" in str(exc_info.value)
        assert "no such service" in str(exc_info.value)

    def test_docker_missing(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   side_effect=FileNotFoundError("docker")):
            with pytest.raises(SupervisorError) as exc_info:
                supervisor.stop()

        assert exc_info.value.hint == "Run: sudo craftctl install"

    def test_timeout(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.run",
                   side_effect=subprocess.TimeoutExpired([], 60)):
            with pytest.raises(SupervisorError, match="timed out"):
                supervisor.pull()


class TestStreamLogs:
    def test_yields_lines_and_terminates(self, supervisor):
        process = MagicMock()
        process.stdout.__iter__.return_value = iter(["line one\n", "line two\n", "line three\n"])
        process.poll.return_value = None

        with patch("craftctl.services.docker_compose.supervisor.subprocess.Popen",
                   return_value=process) as mock_popen:
            logs = supervisor.stream_logs("minecraft")
            assert next(logs) == "line one"
            assert next(logs) == "line two"
            logs.close()

        cmd = mock_popen.call_args[0][0]
        assert cmd[-3:] == ['logs', '-f', 'minecraft']
        process.terminate.assert_called_once()
        process.stdout.close.assert_called_once()

    def test_process_started_before_iteration(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.Popen") as mock_popen:
            supervisor.stream_logs("minecraft")

        mock_popen.assert_called_once()

    def test_launch_failure_raised_immediately(self, supervisor):
        with patch("craftctl.services.docker_compose.supervisor.subprocess.Popen",
                   side_effect=PermissionError("docker.sock")):
            with pytest.raises(SupervisorError, match="Cannot run docker compose"):
                supervisor.stream_logs("minecraft")
