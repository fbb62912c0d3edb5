# server.py
# Static file server for the start_local_server tool.
#
# Each server runs in its own daemon thread and owns its socket and
# directory; the agent loop never waits on it.

import functools
import os
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

DEFAULT_PORT = 8080

_servers: list[tuple[ThreadingHTTPServer, threading.Thread]] = []
_lock = threading.Lock()


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format: str, *args) -> None:
        pass


def start_local_server(directory: str, port: int = DEFAULT_PORT, host: str = "localhost") -> str:
    """Serve directory over HTTP. Returns a status message (or error text)."""
    full_path = os.path.abspath(directory)
    if not os.path.isdir(full_path):
        return f"Error: Directory '{full_path}' does not exist."

    handler = functools.partial(_QuietHandler, directory=full_path)
    try:
        httpd = ThreadingHTTPServer((host, port), handler)
    except OSError as e:
        return f"Error: could not bind {host}:{port}: {e}"

    thread = threading.Thread(target=httpd.serve_forever, name=f"static-{port}", daemon=True)
    thread.start()
    with _lock:
        _servers.append((httpd, thread))

    bound_port = httpd.server_address[1]
    return f"Server for '{directory}' is running on http://{host}:{bound_port}."


def running_servers() -> list[str]:
    with _lock:
        return [f"http://{httpd.server_address[0]}:{httpd.server_address[1]}" for httpd, _ in _servers]


def stop_servers() -> None:
    with _lock:
        servers = list(_servers)
        _servers.clear()
    for httpd, thread in servers:
        httpd.shutdown()
        httpd.server_close()
        thread.join(timeout=5)


def wait_for_servers() -> None:
    """Block until every server thread exits (normally: until KeyboardInterrupt)."""
    with _lock:
        threads = [thread for _, thread in _servers]
    for thread in threads:
        while thread.is_alive():
            thread.join(timeout=0.5)
