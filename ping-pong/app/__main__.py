"""CLI entrypoint for running the ping-pong service (``python -m app``)."""

from __future__ import annotations

import os

import uvicorn

from app.main import app


def main() -> None:
    host = os.environ.get("PING_PONG_HOST", "0.0.0.0")
    port = int(os.environ.get("PING_PONG_PORT", "8000"))
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
