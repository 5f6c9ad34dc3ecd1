"""Command-line entry point for the face bloat quiz server.

Installed as ``facebloat-server``; ``python -m facebloat.core.server.main``
does the same. Quiz sessions carry menstruation status and body
measurements, and the server has no authentication, so it only listens on
loopback unless ``FACEBLOAT_ALLOW_INSECURE_BIND`` is set.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address

from facebloat.core.config.settings import Settings, get_settings
from facebloat.core.server.app import create_app

logger = logging.getLogger(__name__)

LOOPBACK_NAMES = frozenset({"localhost"})


def _is_loopback_host(host: str) -> bool:
    if host in LOOPBACK_NAMES:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        # Any other hostname may resolve off-box.
        return False


def _check_bind_address(settings: Settings) -> None:
    if settings.facebloat_allow_insecure_bind or _is_loopback_host(settings.facebloat_host):
        return
    raise RuntimeError(
        f"Quiz sessions hold health data; refusing to serve them on {settings.facebloat_host}. "
        "Bind to 127.0.0.1, or set FACEBLOAT_ALLOW_INSECURE_BIND=true behind your own auth proxy."
    )


def run() -> None:
    """Serve the quiz tools over Streamable HTTP until interrupted."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.facebloat_log_level.upper(), logging.INFO)
    )
    _check_bind_address(settings)

    mcp = create_app()
    logger.info(
        "Face bloat quiz listening on http://%s:%d (storage: %s)",
        settings.facebloat_host,
        settings.facebloat_port,
        settings.storage_backend,
    )
    mcp.run(
        transport="streamable-http",
        host=settings.facebloat_host,
        port=settings.facebloat_port,
    )


if __name__ == "__main__":
    run()
