# src/bootstrap_email/services/style_service.py
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Tuple, Union

import cssutils
import sass

from bootstrap_email.exceptions import StyleProcessingError
from bootstrap_email.model import StyleBundle

logger = logging.getLogger(__name__)

SASS_EXTENSIONS = (".scss", ".sass")

# `$grid-columns: 12;` / `$grid-columns: 12 !default;` (semicolon optional for indented syntax)
SASS_VARIABLE = re.compile(
    r"^\s*\$(?P<name>[\w-]+)\s*:\s*(?P<value>[^;\n]+?)\s*(?P<default>!default)?\s*;?\s*$",
    re.MULTILINE,
)
_LEADING_INT = re.compile(r"^(-?\d+)")

NOT_INLINEABLE = (
    ":active", ":any-link", ":blank", ":checked", ":current", ":default", ":dir",
    ":disabled", ":focus", ":focus-visible", ":focus-within", ":hover",
    ":indeterminate", ":in-range", ":invalid", ":lang", ":left", ":link",
    ":local-link", ":is", ":optional", ":placeholder-shown", ":playing", ":paused",
    ":read-only", ":read-write", ":required", ":right", ":scope", ":valid",
    ":target", ":visited", ":before", ":after", ":first-line", ":first-letter",
    ":grammar-error", ":selection", ":spelling-error",
)
NOT_INLINEABLE_PATTERN = re.compile("|".join(re.escape(p) for p in NOT_INLINEABLE))


class StyleService:
    """
    Loads a stylesheet and prepares it for the compiler.
    Sass sources are compiled with libsass; the resulting CSS is split into rules
    that can be inlined and rules that have to live in <head>.
    """

    def __init__(self) -> None:
        cssutils.log.setLevel(logging.CRITICAL)

    def process(self, style_path: Union[str, Path]) -> StyleBundle:
        """
        Processes one stylesheet.

        Args:
            style_path (Union[str, Path]): Path to a .css, .scss or .sass file.

        Returns:
            StyleBundle: Inlineable css, head rules and numeric Sass variables.
        """
        path = Path(style_path)
        css, variables = self._load_style(path)

        logger.debug("Extract not inlineable css from %s", path.name)
        inline_css, head_rules = self.split_rules(css)
        logger.debug("Styles extracted successfully.")

        return StyleBundle(css=inline_css, head_rules=head_rules, variables=variables)

    def _load_style(self, path: Path) -> Tuple[str, Dict[str, int]]:
        """Reads the file, compiling Sass sources into CSS."""
        if not path.is_file():
            raise StyleProcessingError(f"Style file not found: {path}")

        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StyleProcessingError(f"Cannot read {path}: {e}") from e

        if path.suffix.lower() not in SASS_EXTENSIONS:
            logger.debug("%s read successfully", path)
            return source, {}

        logger.debug("%s detected as sass-file", path)
        try:
            css = sass.compile(filename=str(path), output_style="compressed")
        except sass.CompileError as e:
            raise StyleProcessingError(f"Cannot compile {path}: {e}") from e

        logger.debug("%s read and parsed successfully", path)
        return css, self.extract_variables(source)

    @staticmethod
    def extract_variables(source: str) -> Dict[str, int]:
        """
        Collects the global numeric variables of a Sass source, e.g. `$grid-columns: 12;`.
        `!default` declarations only apply when the variable is not set yet.
        Non-numeric values (colors, maps, ...) are ignored.
        """
        variables: Dict[str, int] = {}
        for match in SASS_VARIABLE.finditer(source):
            number = _LEADING_INT.match(match.group("value"))
            if not number:
                continue
            name = match.group("name")
            if match.group("default") and name in variables:
                continue
            variables[name] = int(number.group(1))
        return variables

    @staticmethod
    def split_rules(css: str) -> Tuple[str, str]:
        """
        Splits CSS into inlineable rules and head rules.

        At-rules (@media, @font-face, ...) and style rules with pseudo-classes or
        pseudo-elements cannot be expressed in a style attribute.

        Returns:
            Tuple[str, str]: (inlineable css, head css)
        """
        sheet = cssutils.parseString(css, validate=False)
        inline_rules, head_rules = [], []

        for rule in sheet.cssRules:
            if rule.type in (rule.COMMENT, rule.CHARSET_RULE):
                continue
            if rule.type == rule.STYLE_RULE and not NOT_INLINEABLE_PATTERN.search(rule.selectorText):
                inline_rules.append(rule.cssText)
            else:
                head_rules.append(rule.cssText)

        return "\n".join(inline_rules), "\n".join(head_rules)
