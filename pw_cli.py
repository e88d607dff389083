# pw_cli.py
from __future__ import annotations

import json
import shutil
import subprocess
from typing import Any, List, Sequence

from errors import BackendCommandFailed, IncompatibleNativeLibrary


# Dynamic loader messages printed when the installed libraries are too old for the tool.
_LOADER_ERRORS = ("symbol lookup error", "glibcxx_", "version `", "undefined symbol")


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(cmd), capture_output=True, text=True)


def _check_loader(msg: str) -> None:
    low = msg.lower()
    if any(tag in low for tag in _LOADER_ERRORS):
        raise IncompatibleNativeLibrary(msg)


def tools_available() -> bool:
    return shutil.which("pw-dump") is not None and shutil.which("pw-link") is not None


def pw_dump_json() -> List[Any]:
    try:
        p = _run(["pw-dump"])
    except OSError as e:
        raise BackendCommandFailed(f"pw-dump could not be started: {e}") from e

    if p.returncode != 0:
        msg = (p.stderr or p.stdout).strip()
        _check_loader(msg)
        raise BackendCommandFailed(f"pw-dump failed: {msg}")

    try:
        data = json.loads(p.stdout)
    except ValueError as e:
        raise BackendCommandFailed(f"pw-dump output is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise BackendCommandFailed("pw-dump output JSON is not a list")

    return data


def pw_link_connect(out_full: str, in_full: str) -> None:
    if not out_full or not in_full:
        raise BackendCommandFailed("Invalid port names for link creation.")
    p = _run(["pw-link", out_full, in_full])
    if p.returncode == 0:
        return

    msg = (p.stderr or p.stdout).strip()
    if "exist" in msg.lower():
        return

    raise BackendCommandFailed(f"pw-link connect failed ({out_full} -> {in_full}): {msg}")


def pw_link_disconnect(out_full: str, in_full: str) -> bool:
    """Returns False when the link was already gone."""
    if not out_full or not in_full:
        return False

    p = _run(["pw-link", "-d", out_full, in_full])
    if p.returncode == 0:
        return True

    msg = (p.stderr or p.stdout).strip()
    low = msg.lower()
    if "no such" in low or "not found" in low or "does not exist" in low:
        return False

    raise BackendCommandFailed(f"pw-link disconnect failed ({out_full} -> {in_full}): {msg}")
