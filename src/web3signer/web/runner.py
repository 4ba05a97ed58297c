"""Uvicorn runner for the signer API."""

from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from web3signer.app import App
from web3signer.config import Config
from web3signer.web.server import create_fastapi_app


def build_log_config(debug: bool) -> dict[str, Any]:
    """Uvicorn logging config with compact access lines and the app's log level."""
    log_config: dict[str, Any] = {
        **LOGGING_CONFIG,
        "formatters": {name: dict(formatter) for name, formatter in LOGGING_CONFIG["formatters"].items()},
        "loggers": {name: dict(logger) for name, logger in LOGGING_CONFIG["loggers"].items()},
    }
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    level = "DEBUG" if debug else "INFO"
    for logger in log_config["loggers"].values():
        logger["level"] = level
    return log_config


def run_server(app: App, config: Config) -> None:
    """Serve the API until interrupted."""
    uvicorn.run(
        create_fastapi_app(app, config),
        host=config.host,
        port=config.port,
        log_config=build_log_config(config.debug),
        access_log=True,
        # Session cookies must see the client's scheme when running behind a TLS proxy
        proxy_headers=config.session_https_only,
        server_header=False,
    )
