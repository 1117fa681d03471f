"""Tests for container teardown.

docker is never run: subprocess.run is replaced with a fake.
"""

import subprocess

import pytest

from sniaff.core import docker
from sniaff.core.docker import (
    ContainerError,
    DockerContainerRemover,
    NullContainerRemover,
    container_name,
)


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run; tests set the result or error to produce."""
    calls = []
    outcome = {"returncode": 0, "stderr": "", "error": None}

    def run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        if outcome["error"] is not None:
            raise outcome["error"]
        return subprocess.CompletedProcess(
            cmd, outcome["returncode"], stdout="", stderr=outcome["stderr"]
        )

    monkeypatch.setattr(docker.subprocess, "run", run)
    return calls, outcome


def test_container_name():
    """Test container names follow <prefix>-revdocker-<sessionId>."""
    assert (
        container_name("sniaff", "sniaff-a1b2c3d4")
        == "sniaff-revdocker-sniaff-a1b2c3d4"
    )
    assert container_name("lab", "sniaff-a1b2c3d4") == "lab-revdocker-sniaff-a1b2c3d4"


def test_remove_runs_docker_rm_force(fake_run):
    """Test removal is a forced docker rm (stop + remove)."""
    calls, _ = fake_run

    assert DockerContainerRemover().remove("sniaff-revdocker-sniaff-a1b2c3d4")

    cmd, kwargs = calls[0]
    assert cmd == ["docker", "rm", "-f", "sniaff-revdocker-sniaff-a1b2c3d4"]
    assert kwargs["capture_output"] is True
    assert kwargs["timeout"] == 30.0


def test_remove_custom_binary(fake_run):
    calls, _ = fake_run

    DockerContainerRemover(docker_bin="podman", timeout=5).remove("c1")

    assert calls[0][0] == ["podman", "rm", "-f", "c1"]
    assert calls[0][1]["timeout"] == 5


def test_remove_not_found(fake_run):
    """Test a missing container is reported as not removed, not an error."""
    _, outcome = fake_run
    outcome["returncode"] = 1
    outcome["stderr"] = "Error response from daemon: No such container: c1\n"

    assert DockerContainerRemover().remove("c1") is False


def test_remove_other_failure(fake_run):
    _, outcome = fake_run
    outcome["returncode"] = 1
    outcome["stderr"] = "Cannot connect to the Docker daemon\n"

    with pytest.raises(ContainerError, match="Cannot connect to the Docker daemon"):
        DockerContainerRemover().remove("c1")


def test_remove_docker_missing(fake_run):
    """Test a missing docker binary raises ContainerError."""
    _, outcome = fake_run
    outcome["error"] = FileNotFoundError(2, "No such file or directory", "docker")

    with pytest.raises(ContainerError, match="docker not found"):
        DockerContainerRemover().remove("c1")


def test_remove_timeout(fake_run):
    _, outcome = fake_run
    outcome["error"] = subprocess.TimeoutExpired(["docker"], 30)

    with pytest.raises(ContainerError, match="Timed out"):
        DockerContainerRemover().remove("c1")


def test_null_remover():
    assert NullContainerRemover().remove("c1") is False
