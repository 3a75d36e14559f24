from __future__ import annotations

import argparse

import uvicorn

from libvault.core.config import get_settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the libvault API server")
    parser.add_argument("--host", default=None, help="Host to bind to (default: LIBVAULT_API_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: LIBVAULT_API_PORT)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    uvicorn.run(
        "libvault.api.app:create_app",
        factory=True,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
