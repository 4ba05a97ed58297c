"""Tests for uvicorn logging configuration."""

from uvicorn.config import LOGGING_CONFIG

from web3signer.web.runner import build_log_config


class TestBuildLogConfig:
    def test_debug_level(self):
        """Test that debug mode lowers every uvicorn logger to DEBUG."""
        log_config = build_log_config(debug=True)
        assert {logger["level"] for logger in log_config["loggers"].values()} == {"DEBUG"}

    def test_shared_config_untouched(self):
        """Test that uvicorn's module-level config is not mutated."""
        original = LOGGING_CONFIG["formatters"]["access"]["fmt"]
        build_log_config(debug=False)
        assert LOGGING_CONFIG["formatters"]["access"]["fmt"] == original
