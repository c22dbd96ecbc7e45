"""Uvicorn server runner with custom configuration."""

import copy

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from alsader.app import App
from alsader.config import Config
from alsader.web.server import create_fastapi_app


def build_log_config(debug: bool) -> dict:
    """Uvicorn logging with timestamps; access lines carry the client address."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s %(levelprefix)s %(message)s"
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s %(levelprefix)s %(client_addr)s "%(request_line)s" %(status_code)s'
    log_config["loggers"]["uvicorn"]["level"] = "DEBUG" if debug else "INFO"
    return log_config


def run_server(app: App, config: Config) -> None:
    fastapi_app = create_fastapi_app(app, config)
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=build_log_config(config.debug),
        access_log=True,
        proxy_headers=True,
    )
