from __future__ import annotations

import uvicorn

from image_relay.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "image_relay.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
