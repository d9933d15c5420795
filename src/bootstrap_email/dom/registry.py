# src/bootstrap_email/dom/registry.py
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import jinja2

from bootstrap_email.core.utils.path_utils import PathUtils
from bootstrap_email.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

TEMPLATE_EXTENSION = ".html.j2"

# Fragments are pure markup, whitespace between tags carries no meaning.
_INTER_TAG_WHITESPACE = re.compile(r">\s+<")


class TemplateRegistry:
    """
    Central registry for the HTML fragment templates used by the rewrite passes.

    Discovers every `*.html.j2` file in the templates directory once and keeps
    the compiled templates in a read-only name -> template mapping.
    """

    _templates: Mapping[str, jinja2.Template] = MappingProxyType({})
    _directory: Optional[Path] = None
    _loaded: bool = False

    @classmethod
    def discover(cls, templates_dir: Optional[Path] = None) -> None:
        """
        Loads all templates found in `templates_dir` (defaults to the packaged templates).

        Subsequent calls are no-ops; use `reset()` first to load another directory.
        """
        if cls._loaded:
            return

        directory = Path(templates_dir) if templates_dir else PathUtils.get_templates_dir()
        environment = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(directory)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )

        templates: Dict[str, jinja2.Template] = {}
        for path in sorted(directory.glob(f"*{TEMPLATE_EXTENSION}")):
            if not path.is_file():
                continue
            name = path.name[:-len(TEMPLATE_EXTENSION)]
            templates[name] = environment.get_template(path.name)
            logger.debug(f"Template loaded: {name}")

        if not templates:
            logger.warning("No templates found in %s", directory)

        cls._templates = MappingProxyType(templates)
        cls._directory = directory
        cls._loaded = True

    @classmethod
    def reset(cls) -> None:
        """Forgets all loaded templates."""
        cls._templates = MappingProxyType({})
        cls._directory = None
        cls._loaded = False

    @classmethod
    def get(cls, name: str) -> jinja2.Template:
        """Retrieves a template by name. Unknown names raise TemplateNotFoundError."""
        cls.discover()
        try:
            return cls._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    @classmethod
    def render(
            cls,
            name: str,
            content: str = "",
            classes: str = "",
            attributes: Optional[Dict[str, Any]] = None,
            variables: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Renders a template with the four fragment slots.

        Args:
            name (str): Name of the template (file name without extension).
            content (str): Markup placed into the content slot.
            classes (str): Space separated classes for templates that reference them.
            attributes (Optional[Dict[str, Any]]): Attributes for templates that reference them.
            variables (Optional[Dict[str, Any]]): Template specific variables.

        Returns:
            str: The rendered markup with inter-tag whitespace collapsed.
        """
        template = cls.get(name)
        rendered = template.render(
            content=content,
            classes=classes,
            attributes=attributes or {},
            variables=variables or {},
        )
        return _INTER_TAG_WHITESPACE.sub("><", rendered).strip()

    @classmethod
    def get_all(cls) -> Mapping[str, jinja2.Template]:
        """Returns the read-only mapping of all loaded templates."""
        cls.discover()
        return cls._templates

    @classmethod
    def get_all_names(cls) -> List[str]:
        return sorted(cls.get_all().keys())
