# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""BDD scenarios driving the ``rivet`` proxy against a stub Foundry toolchain."""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenario, then, when

pytestmark = pytest.mark.skipif(os.name != "posix", reason="stub toolchain uses POSIX shell scripts")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
FEATURE = "proxy/features/proxy.feature"
STUB_BINARIES = ("forge", "cast", "anvil", "chisel")

TOOL_STUB = """#!/bin/sh
name=$(basename "$0")
printf '%s\\n' "$*" >> "$STUB_DIR/$name.log"
if [ "$1" = "--version" ]; then
  printf '%s %s (deadbeef 2025-01-01T00:00:00Z)\\n' "$name" "$(cat "$STUB_DIR/version" 2>/dev/null)"
  exit 0
fi
exit "$(cat "$STUB_DIR/exit_code" 2>/dev/null || echo 0)"
"""

HELPER_STUB = """#!/bin/sh
printf '%s\\n' "$*" >> "$STUB_DIR/foundryup.log"
if [ "$1" = "--install" ]; then
  printf '%s\\n' "$2" > "$STUB_DIR/version"
  exit 0
fi
bin=$(dirname "$0")
for tool in forge cast anvil chisel; do
  cp "$STUB_DIR/tool-stub" "$bin/$tool"
  chmod +x "$bin/$tool"
done
printf 'v1.1.0\\n' > "$STUB_DIR/version"
"""

BOOTSTRAP_STUB = """set -e
mkdir -p "$FOUNDRY_DIR/bin"
cp "$STUB_DIR/helper-stub" "$FOUNDRY_DIR/bin/foundryup"
chmod +x "$FOUNDRY_DIR/bin/foundryup"
"""


@dataclass
class StubToolchain:
    """Filesystem layout of the stub toolchain and the project under test."""

    root: Path
    stub_dir: Path
    bin_dir: Path
    project: Path

    def environment(self) -> dict[str, str]:
        env = dict(os.environ)
        pythonpath = [str(PROJECT_ROOT / "src"), env.get("PYTHONPATH", "")]
        env.update(
            {
                "PATH": os.pathsep.join([str(self.bin_dir), env.get("PATH", os.defpath)]),
                "PYTHONPATH": os.pathsep.join(filter(None, pythonpath)),
                "HOME": str(self.root / "home"),
                "SHELL": "/bin/bash",
                "FOUNDRY_DIR": str(self.bin_dir.parent),
                "STUB_DIR": str(self.stub_dir),
                "RIVET_EMOJI": "0",
                "RIVET_INSTALL_URL": (self.stub_dir / "install.sh").as_uri(),
            }
        )
        return env

    def install_binaries(self) -> None:
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        for name in (*STUB_BINARIES, "foundryup"):
            source = self.stub_dir / ("helper-stub" if name == "foundryup" else "tool-stub")
            target = self.bin_dir / name
            target.write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
            target.chmod(0o755)

    def calls(self, binary: str) -> list[str]:
        log = self.stub_dir / f"{binary}.log"
        if not log.exists():
            return []
        return log.read_text(encoding="utf-8").splitlines()

    def runs(self, binary: str) -> list[str]:
        """Return recorded invocations of ``binary`` other than version probes."""

        return [line for line in self.calls(binary) if line != "--version"]


@scenario(FEATURE, "Matching toolchain runs forge and propagates its exit status")
def test_matching_toolchain_runs_forge() -> None:
    """Execute scenario via pytest-bdd."""


@scenario(FEATURE, "Mismatched toolchain is updated before running")
def test_mismatched_toolchain_is_updated() -> None:
    """Execute scenario via pytest-bdd."""


@scenario(FEATURE, "Homebrew installations are rejected without updating")
def test_homebrew_installation_is_rejected() -> None:
    """Execute scenario via pytest-bdd."""


@scenario(FEATURE, "First argument selects another toolchain binary")
def test_first_argument_selects_binary() -> None:
    """Execute scenario via pytest-bdd."""


@scenario(FEATURE, "Absent toolchain is bootstrapped and pinned")
def test_absent_toolchain_is_bootstrapped() -> None:
    """Execute scenario via pytest-bdd."""


@scenario(FEATURE, "Missing declaration stops before touching the toolchain")
def test_missing_declaration_stops_early() -> None:
    """Execute scenario via pytest-bdd."""


@given("a stub foundry toolchain on PATH", target_fixture="stub")
def stub_toolchain(tmp_path: Path) -> StubToolchain:
    stub = StubToolchain(
        root=tmp_path,
        stub_dir=tmp_path / "stub",
        bin_dir=tmp_path / "foundry" / "bin",
        project=tmp_path / "project" / "contracts",
    )
    stub.stub_dir.mkdir()
    stub.project.mkdir(parents=True)
    (tmp_path / "home").mkdir()
    (stub.stub_dir / "tool-stub").write_text(TOOL_STUB, encoding="utf-8")
    (stub.stub_dir / "helper-stub").write_text(HELPER_STUB, encoding="utf-8")
    (stub.stub_dir / "install.sh").write_text(BOOTSTRAP_STUB, encoding="utf-8")
    return stub


@given(parsers.parse('the project declares foundry version "{version}"'))
def declare_version(stub: StubToolchain, version: str) -> None:
    (stub.project.parent / ".foundry-version").write_text(f"{version}\n", encoding="utf-8")


@given("the project has no version declaration")
def remove_declaration(stub: StubToolchain) -> None:
    (stub.project.parent / ".foundry-version").unlink()


@given(parsers.parse('the stub toolchain reports version "{version}"'))
def installed_toolchain(stub: StubToolchain, version: str) -> None:
    stub.install_binaries()
    (stub.stub_dir / "version").write_text(f"{version}\n", encoding="utf-8")


@given("no foundry toolchain is installed")
def absent_toolchain(stub: StubToolchain) -> None:
    assert not stub.bin_dir.exists()


@given(parsers.parse("forge exits with status {code:d}"))
def forge_exit_code(stub: StubToolchain, code: int) -> None:
    (stub.stub_dir / "exit_code").write_text(f"{code}\n", encoding="utf-8")


@when(parsers.parse('I run the proxy with "{args}"'), target_fixture="proxy_result")
def run_proxy(stub: StubToolchain, args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "rivet", *shlex.split(args)],
        env=stub.environment(),
        cwd=stub.project,
        capture_output=True,
        text=True,
        timeout=60,
        check=False,
    )


@then(parsers.parse("the proxy exits with status {code:d}"))
def assert_exit_code(proxy_result: subprocess.CompletedProcess[str], code: int) -> None:
    assert proxy_result.returncode == code, proxy_result.stderr


@then(parsers.parse('the proxy reported "{message}"'))
def assert_reported(proxy_result: subprocess.CompletedProcess[str], message: str) -> None:
    assert message in proxy_result.stderr


@then(parsers.parse('{binary} received "{args}"'))
def assert_received(stub: StubToolchain, binary: str, args: str) -> None:
    assert stub.runs(binary) == [args]


@then(parsers.parse("{binary} was not run"))
def assert_not_run(stub: StubToolchain, binary: str) -> None:
    assert stub.runs(binary) == []


@then(parsers.parse('foundryup was called with "{args}"'))
def assert_helper_called(stub: StubToolchain, args: str) -> None:
    assert args in stub.calls("foundryup")


@then("foundryup was not called")
def assert_helper_not_called(stub: StubToolchain) -> None:
    assert stub.calls("foundryup") == []
