# src/bootstrap_email/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving the package's data paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_package_root() -> Path:
        """Returns the absolute path of the installed bootstrap_email package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    @staticmethod
    def get_assets_dir() -> Path:
        return PathUtils.get_package_root() / "assets"

    @staticmethod
    def get_templates_dir() -> Path:
        """Directory holding the HTML fragment templates (*.html.j2)."""
        return PathUtils.get_assets_dir() / "templates"

    @staticmethod
    def get_default_style_path() -> Path:
        """The stylesheet that is inlined when no style is configured."""
        return PathUtils.get_assets_dir() / "bootstrap-email.scss"

    @staticmethod
    def get_default_head_path() -> Path:
        """The stylesheet injected into <head> when no head style is configured."""
        return PathUtils.get_assets_dir() / "head.scss"

    # --- Helper methods ---

    @staticmethod
    def get_output_path(output: Path, source_name: str) -> Path:
        """
        Returns the file a compiled document is written to when compiling into a directory.
        Creates the directory if it doesn't exist.
        """
        output.mkdir(parents=True, exist_ok=True)
        return output / Path(source_name).name
