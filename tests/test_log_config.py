import structlog

from authhub.log_config import configure_logging


def test_configure_logging_json() -> None:
    try:
        configure_logging("DEBUG", json=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()


def test_configure_logging_console() -> None:
    try:
        configure_logging("INFO", json=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    finally:
        structlog.reset_defaults()
