# tests/core/test_core_utils.py
import logging

import pytest

from bootstrap_email.core.utils.configure_logging import TqdmLogHandler, configure_logger
from bootstrap_email.core.utils.path_utils import PathUtils


@pytest.fixture
def restore_root_logger():
    """Bewaart de root logger en zet hem na de test terug."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logger_installs_single_tqdm_handler(restore_root_logger):
    """Test of er precies één tqdm-vriendelijke handler op de root logger staat."""
    configure_logger("DEBUG")
    configure_logger("DEBUG")

    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0], TqdmLogHandler)
    assert restore_root_logger.level == logging.DEBUG


def test_configure_logger_silences_noisy_loggers(restore_root_logger):
    """Test of gedempte loggers hun niveau en de handler het opgegeven formaat krijgen."""
    handler = configure_logger(
        "INFO",
        silenced_loggers={"CSSUTILS": "CRITICAL"},
        fmt="%(levelname)s %(message)s",
    )

    assert handler.formatter._fmt == "%(levelname)s %(message)s"
    assert logging.getLogger("CSSUTILS").level == logging.CRITICAL


def test_configure_logger_unknown_level_falls_back(restore_root_logger):
    """Test of een onbekend niveau terugvalt op INFO."""
    configure_logger("NOT_A_LEVEL")
    assert restore_root_logger.level == logging.INFO


def test_packaged_paths_exist():
    """Test of de meegeleverde bestanden op de verwachte plek staan."""
    assert PathUtils.get_settings_file().is_file()
    assert PathUtils.get_templates_dir().is_dir()
    assert PathUtils.get_default_style_path().is_file()
    assert PathUtils.get_default_head_path().is_file()


def test_get_output_path_creates_directory(tmp_path):
    """Test of de uitvoermap wordt aangemaakt en alleen de bestandsnaam wordt gebruikt."""
    target = tmp_path / "out" / "nested"
    path = PathUtils.get_output_path(target, "/some/where/welcome.html")

    assert target.is_dir()
    assert path == target / "welcome.html"
