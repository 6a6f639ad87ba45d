"""Web server entry point for the RAWBOT API"""

import os
import socket
import sys

import uvicorn
from dotenv import load_dotenv

from rawbot.config import load_config
from rawbot.utils.exceptions import ConfigError


def _port_in_use(host: str, port: int) -> bool:
    """Return True if the given port is already in use."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True


def _get_available_port(host: str, preferred: int, max_tries: int = 10) -> int:
    """Return preferred port if free, otherwise the first free port in [preferred, preferred+max_tries)."""
    for p in range(preferred, preferred + max_tries):
        if not _port_in_use(host, p):
            return p
    raise RuntimeError(
        f"None of the ports {preferred}-{preferred + max_tries - 1} are available. "
        "Stop the process using the port or set WEB_PORT to a different number."
    )


def main() -> None:
    # Load environment variables from .env before the config is built
    load_dotenv()

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    from web.main import create_app

    app = create_app(config)

    host = os.getenv("WEB_HOST", "0.0.0.0")
    preferred_port = int(os.getenv("WEB_PORT", "3000"))
    port = _get_available_port(host, preferred_port)
    if port != preferred_port:
        print(f"Port {preferred_port} is in use; using port {port} instead.")

    print("Starting RAWBOT API...")
    print(f"Local server will be available at: http://localhost:{port}")
    print(f"Instagram OAuth redirect URI: {config.oauth_redirect_uri}")
    print()

    try:
        uvicorn.run(app, host=host, port=port, reload=False)
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
