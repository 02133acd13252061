# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for command dispatch and child process supervision."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest

from rivet.errors import ChildSpawnError
from rivet.supervisor import Invocation, ProcessSupervisor, exit_status, program_name, resolve_invocation

posix_only = pytest.mark.skipif(os.name != "posix", reason="requires POSIX signals")


@pytest.mark.parametrize(
    ("program", "argv", "expected"),
    [
        ("/usr/local/bin/cast", ["call", "0xabc"], Invocation("cast", ("call", "0xabc"))),
        ("anvil", ["forge", "--port", "1"], Invocation("anvil", ("forge", "--port", "1"))),
        ("rivet", ["chisel", "--help"], Invocation("chisel", ("--help",))),
        ("rivet", ["build", "--sizes"], Invocation("forge", ("build", "--sizes"))),
        ("rivet", ["--", "cast"], Invocation("forge", ("--", "cast"))),
        ("rivet", [], Invocation("forge", ())),
        ("rivet", ["forge"], Invocation("forge", ())),
        ("/opt/bin/cast.exe", ["test"], Invocation("cast", ("test",))),
    ],
)
def test_resolve_invocation_dispatch(program: str, argv: list[str], expected: Invocation) -> None:
    assert resolve_invocation(program, argv) == expected


def test_program_name_strips_executable_suffix() -> None:
    assert program_name("/opt/bin/cast.py") == "cast"
    assert program_name("CHISEL.EXE") == "CHISEL"
    assert program_name("/opt/bin/forge") == "forge"


@pytest.mark.parametrize(("returncode", "expected"), [(0, 0), (3, 3), (255, 255), (-15, 143), (-9, 137)])
def test_exit_status_maps_signal_deaths(returncode: int, expected: int) -> None:
    assert exit_status(returncode) == expected


def _python_locator(binary: str, *, exclude: object = ()) -> Path:
    del binary, exclude
    return Path(sys.executable)


def test_run_propagates_child_exit_code() -> None:
    supervisor = ProcessSupervisor(locator=_python_locator, poll_interval=0.01)

    code = supervisor.run(Invocation("forge", ("-c", "import sys; sys.exit(7)")))

    assert code == 7


def test_run_forwards_arguments_verbatim(tmp_path: Path) -> None:
    output = tmp_path / "argv.txt"
    script = "import sys, pathlib; pathlib.Path(sys.argv[1]).write_text('|'.join(sys.argv[2:]))"
    supervisor = ProcessSupervisor(locator=_python_locator, poll_interval=0.01)

    code = supervisor.run(Invocation("forge", ("-c", script, str(output), "--", "a b", "--help")))

    assert code == 0
    assert output.read_text() == "--|a b|--help"


@posix_only
def test_child_killed_by_signal_maps_to_shell_status() -> None:
    supervisor = ProcessSupervisor(locator=_python_locator, poll_interval=0.01)

    code = supervisor.run(Invocation("forge", ("-c", "import os, signal; os.kill(os.getpid(), signal.SIGKILL)")))

    assert code == 128 + signal.SIGKILL


def test_missing_binary_raises_spawn_error() -> None:
    supervisor = ProcessSupervisor(locator=lambda binary, exclude=(): None)

    with pytest.raises(ChildSpawnError) as excinfo:
        supervisor.run(Invocation("chisel", ()))

    assert excinfo.value.exit_code == 127
    assert "chisel" in excinfo.value.message


def test_unspawnable_binary_raises_spawn_error() -> None:
    def broken_spawner(command: list[str]) -> subprocess.Popen[bytes]:
        raise PermissionError(13, "Permission denied", command[0])

    supervisor = ProcessSupervisor(locator=_python_locator, spawner=broken_spawner)

    with pytest.raises(ChildSpawnError, match="Permission denied"):
        supervisor.run(Invocation("forge", ()))


def test_locator_receives_proxy_exclusions(tmp_path: Path) -> None:
    seen: list[tuple[str, tuple[Path, ...]]] = []
    proxy = tmp_path / "forge"

    def locator(binary: str, *, exclude: tuple[Path, ...] = ()) -> Path:
        seen.append((binary, tuple(exclude)))
        return Path(sys.executable)

    ProcessSupervisor(locator=locator, exclude=(proxy,)).locate("forge")

    assert seen == [("forge", (proxy,))]


class _SelfSignallingSpawner:
    """Spawn a Python child and signal the supervisor once the child is ready."""

    def __init__(self, child_code: str, signum: int) -> None:
        self.child_code = child_code
        self.signum = signum
        self.process: subprocess.Popen[bytes] | None = None

    def __call__(self, command: list[str]) -> subprocess.Popen[bytes]:
        self.process = subprocess.Popen([command[0], "-c", self.child_code], stdout=subprocess.PIPE)
        assert self.process.stdout is not None
        self.process.stdout.readline()
        threading.Timer(0.05, os.kill, args=(os.getpid(), self.signum)).start()
        return self.process


@posix_only
@pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGINT, signal.SIGHUP, signal.SIGQUIT])
def test_termination_signal_is_forwarded_and_child_reaped(signum: int) -> None:
    if signal.getsignal(signum) == signal.SIG_IGN:
        pytest.skip("signal is ignored by the test runner")
    before = signal.getsignal(signal.SIGTERM)
    spawner = _SelfSignallingSpawner("import time; print('ready', flush=True); time.sleep(30)", signum)
    supervisor = ProcessSupervisor(locator=_python_locator, spawner=spawner, poll_interval=0.01, terminate_timeout=5)

    code = supervisor.run(Invocation("forge", ()))

    assert code == 128 + signum
    assert spawner.process is not None
    assert spawner.process.returncode == -signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) == before


@posix_only
def test_child_ignoring_sigterm_is_killed_after_grace_period() -> None:
    child = (
        "import signal, time\n"
        "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
        "print('ready', flush=True)\n"
        "time.sleep(30)\n"
    )
    spawner = _SelfSignallingSpawner(child, signal.SIGTERM)
    supervisor = ProcessSupervisor(locator=_python_locator, spawner=spawner, poll_interval=0.01, terminate_timeout=0.2)

    code = supervisor.run(Invocation("forge", ()))

    assert code == 128 + signal.SIGTERM
    assert spawner.process is not None
    assert spawner.process.returncode == -signal.SIGKILL


@posix_only
def test_handlers_are_restored_after_normal_exit() -> None:
    sentinel_calls: list[int] = []

    def sentinel(signum: int, frame: object) -> None:
        sentinel_calls.append(signum)

    previous = signal.signal(signal.SIGHUP, sentinel)
    try:
        ProcessSupervisor(locator=_python_locator, poll_interval=0.01).run(Invocation("forge", ("-c", "pass")))
        assert signal.getsignal(signal.SIGHUP) is sentinel
    finally:
        signal.signal(signal.SIGHUP, previous)


@pytest.fixture
def ignored_sighup() -> Iterator[None]:
    previous = signal.signal(signal.SIGHUP, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGHUP, previous)


@posix_only
def test_signal_ignored_at_entry_stays_ignored_for_child(tmp_path: Path, ignored_sighup: None) -> None:
    output = tmp_path / "disposition.txt"
    script = "import pathlib, signal, sys; pathlib.Path(sys.argv[1]).write_text(str(signal.getsignal(signal.SIGHUP)))"
    supervisor = ProcessSupervisor(locator=_python_locator, poll_interval=0.01)

    code = supervisor.run(Invocation("forge", ("-c", script, str(output))))

    assert code == 0
    assert output.read_text() == str(signal.SIG_IGN)
    assert signal.getsignal(signal.SIGHUP) == signal.SIG_IGN


@posix_only
def test_signal_ignored_at_entry_is_not_relayed(ignored_sighup: None) -> None:
    child = "import sys, time; print('ready', flush=True); time.sleep(0.5); sys.exit(3)"
    spawner = _SelfSignallingSpawner(child, signal.SIGHUP)
    supervisor = ProcessSupervisor(locator=_python_locator, spawner=spawner, poll_interval=0.01, terminate_timeout=5)

    code = supervisor.run(Invocation("forge", ()))

    assert code == 3
    assert spawner.process is not None
    assert spawner.process.returncode == 3
