"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..config import ScoutConfig, configure_logging
from ..engine import ApiScoutEngine
from .router import router


def create_app(config: Optional[ScoutConfig] = None,
               engine: Optional[ApiScoutEngine] = None) -> FastAPI:
    """
    Build the service app with one shared engine.

    Args:
        config: Runtime configuration (defaults to ScoutConfig.from_env())
        engine: Pre-built engine; tests pass one with fakes wired in
    """
    config = config or (engine.config if engine else ScoutConfig.from_env())
    configure_logging(config.log_level)

    app = FastAPI(title="apiscout", version=__version__)
    app.state.engine = engine or ApiScoutEngine(config)
    app.include_router(router, prefix=config.route_prefix)

    logging.getLogger("apiscout.api").info(
        f"🚀 apiscout ready, routes mounted at {config.route_prefix or '/'}"
    )
    return app


__all__ = ['create_app']
