"""Application entry point for the Web3Signer backend server."""

from web3signer.app import App
from web3signer.config import Config
from web3signer.logging import setup_logging
from web3signer.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
