"""Run the apiscout service: python -m apiscout"""

import uvicorn

from .api import create_app
from .config import ScoutConfig


def main() -> None:
    config = ScoutConfig.from_env()
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
