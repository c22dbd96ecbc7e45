"""Application entry point for the Al-Sader backend server."""

from alsader.app import App
from alsader.config import Config
from alsader.logging import setup_logging
from alsader.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
