"""Run the panel API server: ``python -m dartmacro.main``."""

import uvicorn

from .api.app import create_app
from .client.core.config import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
