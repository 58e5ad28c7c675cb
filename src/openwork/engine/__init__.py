"""Engine lifecycle: locate, start, stop and diagnose the opencode engine."""

from openwork.engine.doctor import doctor
from openwork.engine.installer import install_engine
from openwork.engine.ports import find_free_port
from openwork.engine.resolver import resolve_engine_executable
from openwork.engine.supervisor import EngineSupervisor

__all__ = [
    "EngineSupervisor",
    "doctor",
    "find_free_port",
    "install_engine",
    "resolve_engine_executable",
]
