"""Ephemeral port allocation for the engine."""

import socket

from openwork.constants import ENGINE_HOSTNAME
from openwork.errors import AllocationError


def find_free_port(host: str = ENGINE_HOSTNAME) -> int:
    """Ask the OS for a currently unused TCP port on `host`.

    Binds a throwaway listener to port 0, reads back the assigned port and
    releases it. The port may be claimed by someone else before the engine
    binds it; that window is accepted.

    Raises:
        AllocationError: If binding or reading the address fails
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, 0))
            port = sock.getsockname()[1]
    except OSError as e:
        raise AllocationError(f"Failed to allocate a free port on {host}: {e}") from e
    return int(port)
