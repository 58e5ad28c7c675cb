"""Process handle for the engine and robust stop helpers.

Design goals:
- Only stop processes we started (tracked by pid + create_time).
- Take down the whole tree: on Windows the npm wrapper script spawns node,
  elsewhere the engine may fork workers.
- Never raise from termination; a process that is already gone is fine.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Any

import psutil

from openwork.constants import STOP_TIMEOUT_SECONDS
from openwork.logging import LogComponent, get_logger
from openwork.models import TrackedProcess

logger = get_logger(LogComponent.PROCESS_CONTROL)


def track_process(pid: int) -> TrackedProcess | None:
    """Create a TrackedProcess for a running PID, recording create_time."""
    try:
        proc = psutil.Process(pid)
        return TrackedProcess(pid=pid, create_time=float(proc.create_time()))
    except Exception:
        return None


def validate_tracked(tp: TrackedProcess) -> psutil.Process | None:
    """Return a psutil.Process only if PID matches create_time (prevents PID reuse bugs)."""
    if tp.pid is None or tp.create_time is None:
        return None
    try:
        proc = psutil.Process(tp.pid)
        if abs(float(proc.create_time()) - float(tp.create_time)) > 0.001:
            return None
        return proc
    except Exception:
        return None


def list_descendants(tp: TrackedProcess) -> list[psutil.Process]:
    proc = validate_tracked(tp)
    if proc is None:
        return []
    try:
        return proc.children(recursive=True)
    except Exception:
        return []


def terminate_processes(procs: list[psutil.Process], timeout: float) -> None:
    """Terminate processes, escalating to kill for any still alive after timeout."""
    if not procs:
        return

    for p in procs:
        try:
            p.terminate()
        except Exception:
            pass

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    if alive:
        for p in alive:
            try:
                p.kill()
            except Exception:
                pass
        psutil.wait_procs(alive, timeout=max(0.5, timeout / 2))


class EngineProcess:
    """Exclusive owner of a spawned engine process."""

    def __init__(self, popen: subprocess.Popen[Any], tracked: TrackedProcess | None):
        self._popen: subprocess.Popen[Any] = popen
        self.tracked: TrackedProcess | None = tracked

    @property
    def pid(self) -> int:
        return self._popen.pid

    def poll(self) -> int | None:
        """Non-blocking liveness check: exit code if exited, else None."""
        return self._popen.poll()

    def kill_and_wait(self, timeout: float = STOP_TIMEOUT_SECONDS) -> None:
        """Kill the process and its descendants and reap it (best-effort)."""
        # Collect the tree before the root dies, children get reparented after.
        descendants = list_descendants(self.tracked) if self.tracked else []

        try:
            self._popen.kill()
        except Exception as e:
            logger.debug(f"Kill pid={self.pid} failed: {e}")

        try:
            self._popen.wait(timeout=timeout)
        except Exception as e:
            logger.warning(f"Engine pid={self.pid} did not exit after kill: {e}")

        try:
            terminate_processes(descendants, timeout=timeout / 2)
        except Exception as e:
            logger.debug(f"Descendant cleanup for pid={self.pid} failed: {e}")


def spawn_process(argv: list[str], cwd: Path) -> EngineProcess:
    """Spawn a detached child with all standard streams discarded.

    Raises:
        OSError: If the OS refuses to launch the process
    """
    # Own process group/session so console signals aimed at the host don't hit the engine.
    popen_kwargs: dict[str, Any] = {}
    if os.name == "nt":
        popen_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP  # type: ignore[attr-defined]
    else:
        popen_kwargs["start_new_session"] = True

    popen = subprocess.Popen(
        argv,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        **popen_kwargs,
    )
    return EngineProcess(popen, track_process(popen.pid))
