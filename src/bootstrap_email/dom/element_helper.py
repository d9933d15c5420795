# src/bootstrap_email/dom/element_helper.py
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

from bootstrap_email.constants import DebugAttributes
from bootstrap_email.dom.registry import TemplateRegistry
from bootstrap_email.exceptions import BootstrapEmailError

logger = logging.getLogger(__name__)

# Placeholder rendered into the content slot, swapped for the real nodes after parsing.
SLOT_NAME = "bte-slot"
SLOT_MARKUP = f"<{SLOT_NAME}></{SLOT_NAME}>"

ClassList = Union[str, Iterable[str], None]


class ElementHelper:
    """
    DOM rewrite primitives shared by all compiler passes.

    Every primitive renders a named template and moves existing nodes into its
    content slot, so the nodes keep their identity (and their provenance
    attributes) instead of being re-parsed from serialized HTML.
    """

    # --- Rewrite primitives ---

    @staticmethod
    def replace(el: Tag, tpl_name: str, variables: Optional[Dict[str, Any]] = None) -> Tag:
        """
        Replaces one element with the given template. The element's children become the
        template content and its attributes are copied onto the template root.

        Returns:
            Tag: The rendered root that took the element's place.
        """
        root, slot = ElementHelper._render(tpl_name, variables=variables)
        ElementHelper._fill(tpl_name, slot, list(el.contents))

        for key, value in el.attrs.items():
            if key == "class":
                root["class"] = ElementHelper._merge_tokens(
                    ElementHelper.get_classes(root), ElementHelper._ensure_list(value)
                )
            else:
                root[key] = list(value) if isinstance(value, list) else value

        el.replace_with(root)
        return root

    @staticmethod
    def wrap_content(
            el: Tag,
            tpl_name: str,
            *,
            classes: ClassList = None,
            attributes: Optional[Dict[str, Any]] = None,
            variables: Optional[Dict[str, Any]] = None,
    ) -> Tag:
        """
        Wraps the content of the given element with the template. The element itself is untouched.

        Returns:
            Tag: The rendered root, now the only child of `el`.
        """
        classes, attributes = ElementHelper._prepare_assets(classes, attributes)
        root, slot = ElementHelper._render(tpl_name, classes, attributes, variables)
        ElementHelper._fill(tpl_name, slot, list(el.contents))
        ElementHelper._apply_assets(root, classes, attributes)

        el.append(root)
        return root

    @staticmethod
    def wrap(
            el: Tag,
            tpl_name: str,
            *,
            classes: ClassList = None,
            attributes: Optional[Dict[str, Any]] = None,
            variables: Optional[Dict[str, Any]] = None,
            transclude_classes: bool = True,
    ) -> Tag:
        """
        Wraps the given element with the template.

        Args:
            el (Tag): Element to wrap. It ends up inside the template's content slot.
            tpl_name (str): Name of the template to use.
            classes (ClassList): Additional classes for the template root.
            attributes (Optional[Dict[str, Any]]): Additional attributes for the template root.
                A `class` entry is merged into `classes`.
            variables (Optional[Dict[str, Any]]): Variables passed to the template.
            transclude_classes (bool): Move the element's classes to the template root.

        Returns:
            Tag: The wrapped element (same object as `el`).
        """
        classes, attributes = ElementHelper._prepare_assets(classes, attributes)

        if transclude_classes:
            source_classes = ElementHelper.get_classes(el)
            if source_classes:
                classes.extend(source_classes)
                ElementHelper.remove_class(el, source_classes)

        root, slot = ElementHelper._render(tpl_name, classes, attributes, variables)
        el.replace_with(root)
        ElementHelper._fill(tpl_name, slot, [el])
        ElementHelper._apply_assets(root, classes, attributes)

        return el

    @staticmethod
    def unwrap(el: Tag) -> None:
        """Removes the given element, but keeps its children in place."""
        el.unwrap()

    @staticmethod
    def create(
            tpl_name: str,
            contents: Optional[List[PageElement]] = None,
            *,
            classes: ClassList = None,
            attributes: Optional[Dict[str, Any]] = None,
            variables: Optional[Dict[str, Any]] = None,
    ) -> Tag:
        """Renders a detached template root with `contents` moved into its content slot."""
        classes, attributes = ElementHelper._prepare_assets(classes, attributes)
        root, slot = ElementHelper._render(tpl_name, classes, attributes, variables)
        ElementHelper._fill(tpl_name, slot, list(contents or []))
        ElementHelper._apply_assets(root, classes, attributes)
        return root

    # --- Class mutation ---

    @staticmethod
    def add_class(el: Tag, classname: ClassList) -> None:
        """Adds classes to the element and logs them in the debug attribute."""
        tokens = ElementHelper._ensure_list(classname)
        if not tokens:
            return
        ElementHelper.append_to_attribute(el, DebugAttributes.CLASS_ADDED, " ".join(tokens))
        el["class"] = ElementHelper._merge_tokens(ElementHelper.get_classes(el), tokens)

    @staticmethod
    def remove_class(el: Tag, classname: ClassList) -> None:
        """Removes classes from the element and logs them in the debug attribute."""
        tokens = ElementHelper._ensure_list(classname)
        if not tokens:
            return
        ElementHelper.append_to_attribute(el, DebugAttributes.CLASS_REMOVED, " ".join(tokens))
        remaining = [c for c in ElementHelper.get_classes(el) if c not in tokens]
        if remaining:
            el["class"] = remaining
        elif "class" in el.attrs:
            del el["class"]

    @staticmethod
    def has_class(el: Tag, classname: str) -> bool:
        return classname in ElementHelper.get_classes(el)

    @staticmethod
    def get_classes(el: Tag) -> List[str]:
        """Returns a copy of the element's class tokens."""
        return ElementHelper._ensure_list(el.get("class"))

    @staticmethod
    def mark_source(el: Tag, source: str) -> None:
        """Records which pass touched the element."""
        ElementHelper.append_to_attribute(el, DebugAttributes.SOURCE, source)

    @staticmethod
    def append_to_attribute(el: Tag, attr: str, val: str) -> None:
        """Appends a value to a space separated attribute, creating it if needed."""
        current = el.get(attr) or ""
        if isinstance(current, list):
            current = " ".join(current)
        el[attr] = f"{current} {val}".strip()

    # --- Internals ---

    @staticmethod
    def _render(
            tpl_name: str,
            classes: Optional[List[str]] = None,
            attributes: Optional[Dict[str, Any]] = None,
            variables: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Tag, Optional[Tag]]:
        """Renders a template and returns its detached root element and content slot."""
        markup = TemplateRegistry.render(
            tpl_name,
            content=SLOT_MARKUP,
            classes=" ".join(classes or []),
            attributes=attributes,
            variables=variables,
        )
        fragment = BeautifulSoup(markup, "html.parser")
        root = next((node for node in fragment.contents if isinstance(node, Tag)), None)
        if root is None:
            raise BootstrapEmailError(f"Template '{tpl_name}' has no root element")

        root.extract()
        return root, root.find(SLOT_NAME)

    @staticmethod
    def _fill(tpl_name: str, slot: Optional[Tag], nodes: List[PageElement]) -> None:
        """Moves `nodes` into the position of the content slot and drops the slot."""
        if slot is None:
            if any(not (isinstance(n, NavigableString) and not n.strip()) for n in nodes):
                raise BootstrapEmailError(f"Template '{tpl_name}' has no content slot")
            return

        for node in nodes:
            slot.insert_before(node)
        slot.decompose()

    @staticmethod
    def _prepare_assets(
            classes: ClassList, attributes: Optional[Dict[str, Any]]
    ) -> Tuple[List[str], Dict[str, Any]]:
        classes = ElementHelper._ensure_list(classes)
        attributes = dict(attributes or {})
        if "class" in attributes:
            classes.extend(ElementHelper._ensure_list(attributes.pop("class")))
        return classes, attributes

    @staticmethod
    def _apply_assets(root: Tag, classes: List[str], attributes: Dict[str, Any]) -> None:
        for key, value in attributes.items():
            root[key] = value if isinstance(value, str) else str(value)
        ElementHelper.add_class(root, classes)

    @staticmethod
    def _merge_tokens(current: List[str], tokens: List[str]) -> List[str]:
        merged = list(current)
        for token in tokens:
            if token not in merged:
                merged.append(token)
        return merged

    @staticmethod
    def _ensure_list(value: Any) -> List[str]:
        """Makes sure the given value is a list of class tokens. Strings are split on whitespace."""
        if value is None:
            return []
        if isinstance(value, (str, int)):
            return str(value).split()
        if isinstance(value, (list, tuple, set, frozenset)):
            tokens: List[str] = []
            for item in value:
                tokens.extend(str(item).split())
            return tokens
        return []
