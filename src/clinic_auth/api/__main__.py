"""
clinic_auth.api.__main__

Run the auth service with `python -m clinic_auth.api`.
"""

from __future__ import annotations

import uvicorn

from clinic_auth.api.app import create_app
from clinic_auth.settings import get_settings


def main() -> None:
    settings = get_settings()

    # Cookies are `Secure` in prod; honour the proxy's scheme so redirects stay on https.
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        proxy_headers=settings.env == "prod",
        log_config=None,  # structlog owns the root logger
    )


if __name__ == "__main__":
    main()
