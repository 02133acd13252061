# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dispatch to a Foundry binary and supervise it until it exits.

The supervisor is transparent to callers: the child inherits the standard
streams and its exit status becomes the proxy's own. Termination signals
received meanwhile are relayed to the child as ``SIGTERM``; a child that
ignores the request is killed once the grace period lapses, and the child is
always reaped before the supervisor returns.
"""

from __future__ import annotations

import signal
import subprocess  # nosec B404
import threading
import time
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Any, Final

from .constants import DEFAULT_BINARY, PROGRAM_SUFFIXES, SIGNAL_EXIT_BASE, TOOLCHAIN_BINARIES
from .errors import ChildSpawnError
from .logging import debug
from .process_utils import find_executable

FORWARDED_SIGNAL_NAMES: Final[tuple[str, ...]] = ("SIGHUP", "SIGINT", "SIGQUIT", "SIGTERM", "SIGPIPE")
FORWARDED_SIGNALS: Final[tuple[signal.Signals, ...]] = tuple(
    getattr(signal, name) for name in FORWARDED_SIGNAL_NAMES if hasattr(signal, name)
)

SignalHandler = Callable[[int, FrameType | None], Any] | int | signal.Handlers | None
Spawner = Callable[[list[str]], "subprocess.Popen[bytes]"]
Locator = Callable[..., Path | None]


@dataclass(frozen=True, slots=True)
class Invocation:
    """Toolchain binary to run together with the arguments it receives."""

    binary: str
    args: tuple[str, ...]


def program_name(program: str) -> str:
    """Return the basename of ``program`` without a platform executable suffix."""

    name = Path(program).name
    for suffix in PROGRAM_SUFFIXES:
        if name.lower().endswith(suffix):
            return name[: -len(suffix)]
    return name


def resolve_invocation(
    program: str,
    argv: Sequence[str],
    *,
    binaries: Sequence[str] = TOOLCHAIN_BINARIES,
    default: str = DEFAULT_BINARY,
) -> Invocation:
    """Decide which binary to run from the proxy's name and arguments.

    Args:
        program: Name the proxy was invoked as (``sys.argv[0]``).
        argv: Arguments following the program name.
        binaries: Known toolchain binary names.
        default: Binary used when neither the program nor the first argument names one.

    Returns:
        Invocation: The binary and the arguments it receives. When the program
        name selects the binary every argument is forwarded; when the first
        argument selects it, that argument is dropped; otherwise ``default``
        receives the arguments unchanged.
    """

    name = program_name(program)
    if name in binaries:
        return Invocation(name, tuple(argv))
    if argv and argv[0] in binaries:
        return Invocation(argv[0], tuple(argv[1:]))
    return Invocation(default, tuple(argv))


def exit_status(returncode: int) -> int:
    """Translate a ``Popen.returncode`` into a shell-style exit status."""

    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


class _SignalRelay:
    """Signal handler that forwards a graceful termination request to the child."""

    def __init__(self, grace: float) -> None:
        self.grace = grace
        self.process: subprocess.Popen[bytes] | None = None
        self.received: int | None = None
        self.deadline: float | None = None
        self.killed = False

    def __call__(self, signum: int, frame: FrameType | None) -> None:
        del frame
        if self.received is None:
            self.received = signum
        self.forward()

    def forward(self) -> None:
        if self.received is None or self.process is None or self.deadline is not None:
            return
        self.deadline = time.monotonic() + self.grace
        try:
            self.process.send_signal(signal.SIGTERM)
        except ProcessLookupError:
            pass

    def escalate(self) -> None:
        if self.process is None or self.killed:
            return
        self.killed = True
        try:
            self.process.kill()
        except ProcessLookupError:
            pass


class ProcessSupervisor:
    """Spawn a toolchain binary and relay signals and exit status."""

    def __init__(
        self,
        *,
        terminate_timeout: float = 10.0,
        poll_interval: float = 0.1,
        exclude: Collection[Path] = (),
        spawner: Spawner | None = None,
        locator: Locator | None = None,
        signals: Sequence[signal.Signals] = FORWARDED_SIGNALS,
    ) -> None:
        self._terminate_timeout = terminate_timeout
        self._poll_interval = poll_interval
        self._exclude = tuple(exclude)
        self._spawn: Spawner = spawner or _default_spawner
        self._locate: Locator = locator or find_executable
        self._signals = tuple(signals)

    def locate(self, binary: str) -> Path:
        """Return the executable for ``binary``, never the proxy itself.

        Raises:
            ChildSpawnError: If ``binary`` is not on the search path.
        """

        executable = self._locate(binary, exclude=self._exclude)
        if executable is None:
            raise ChildSpawnError(binary, "not found on PATH")
        return executable

    def run(self, invocation: Invocation) -> int:
        """Run ``invocation`` to completion and return its exit status.

        Args:
            invocation: Binary and arguments to execute.

        Returns:
            int: The child's exit status, ``128 + n`` when the child died from
            signal ``n``, or ``128 + n`` when the supervisor itself received
            termination signal ``n``.

        Raises:
            ChildSpawnError: If the binary cannot be located or started.
        """

        executable = self.locate(invocation.binary)
        relay = _SignalRelay(self._terminate_timeout)
        previous = self._install_handlers(relay)
        try:
            try:
                relay.process = self._spawn([str(executable), *invocation.args])
            except OSError as exc:
                raise ChildSpawnError(invocation.binary, str(exc)) from exc
            debug(f"Spawned {executable} (pid {relay.process.pid})")
            # A signal may have arrived between installing handlers and spawning.
            relay.forward()
            returncode = self._wait(relay.process, relay)
        finally:
            self._restore_handlers(previous)

        if relay.received is not None:
            debug(f"Received signal {relay.received}; child exited with {returncode}")
            return SIGNAL_EXIT_BASE + relay.received
        return exit_status(returncode)

    def _wait(self, process: subprocess.Popen[bytes], relay: _SignalRelay) -> int:
        while True:
            try:
                return process.wait(timeout=self._poll_interval)
            except subprocess.TimeoutExpired:
                if relay.deadline is not None and time.monotonic() >= relay.deadline:
                    debug(f"Child {process.pid} ignored SIGTERM; killing")
                    relay.escalate()

    def _install_handlers(self, relay: _SignalRelay) -> dict[signal.Signals, SignalHandler]:
        if threading.current_thread() is not threading.main_thread():
            debug("Not on the main thread; signals will not be relayed")
            return {}
        previous: dict[signal.Signals, SignalHandler] = {}
        for signum in self._signals:
            # Signals ignored at entry stay ignored, for us and for the child.
            if signal.getsignal(signum) == signal.SIG_IGN:
                debug(f"{signum.name} is ignored; not relaying it")
                continue
            previous[signum] = signal.signal(signum, relay)
        return previous

    @staticmethod
    def _restore_handlers(previous: dict[signal.Signals, SignalHandler]) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


def _default_spawner(command: list[str]) -> subprocess.Popen[bytes]:
    # Bandit: the executable is a resolved toolchain binary; arguments are
    # forwarded verbatim without shell expansion.
    return subprocess.Popen(command)  # nosec B603


__all__ = [
    "FORWARDED_SIGNALS",
    "Invocation",
    "ProcessSupervisor",
    "exit_status",
    "program_name",
    "resolve_invocation",
]
