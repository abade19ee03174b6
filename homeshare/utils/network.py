"""Local network address discovery."""

import socket
from typing import Optional


def get_local_ip() -> str:
    """First non-loopback IPv4 address of this host, or "localhost".

    Connecting a UDP socket sends no packet; it only makes the kernel pick
    the outgoing interface.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError:
        return "localhost"
    finally:
        sock.close()
    if address.startswith("127.") or address == "0.0.0.0":
        return "localhost"
    return address


def build_server_url(host_header: Optional[str], port: int, secure: bool = False) -> str:
    host = host_header or f"{get_local_ip()}:{port}"
    scheme = "https" if secure else "http"
    return f"{scheme}://{host}"
