"""Run the edge server: ``python -m bridgegate.app``."""

import uvicorn

from bridgegate.app.core.config import settings


def main() -> None:
    # log_config=None keeps the dictConfig applied by create_app()
    uvicorn.run(
        "bridgegate.app.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
