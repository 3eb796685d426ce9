import logging
import socket
from typing import Optional

import uvicorn
from weekmenu.api.api_run import app
from weekmenu.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL

# TEST-NET-1 address: only used to let the OS choose a route, never contacted
ROUTE_PROBE_ADDR = ("192.0.2.1", 9)


def lan_address() -> Optional[str]:
    """Address other household devices can reach this host on, if it has one."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(ROUTE_PROBE_ADDR)
            addr = s.getsockname()[0]
    except OSError:
        return None
    return None if addr.startswith("127.") else addr


def server_urls(port: int = APP_PORT) -> list[str]:
    urls = [f"http://localhost:{port}"]
    addr = lan_address()
    if addr:
        urls.append(f"http://{addr}:{port}")
    return urls


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for url in server_urls():
        print(f"Weekly menu available at {url}")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
