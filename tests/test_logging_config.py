import os, sys

# Ensure project root on path for `import app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.core.logging_config import build_logging_config


def test_console_output_enabled():
    config = build_logging_config(True, "DEBUG")
    assert config["handlers"]["console"]["class"] == "logging.StreamHandler"
    assert config["loggers"]["app"]["level"] == "DEBUG"


def test_console_output_disabled_uses_null_handler():
    config = build_logging_config(False, "INFO")
    assert config["handlers"]["console"] == {"class": "logging.NullHandler"}
