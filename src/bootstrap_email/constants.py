# src/bootstrap_email/constants.py

DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
    '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
)

# Elements that take the full width of their parent unless told otherwise.
BLOCK_ELEMENTS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ol", "ul", "pre", "address", "blockquote", "dl",
    "div", "fieldset", "form", "hr", "noscript", "table",
})

# Elements which cannot contain any children.
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "keygen", "link", "menuitem", "meta", "param", "source",
    "track", "wbr", "basefont", "bgsound", "frame", "isindex",
})

# Classes which force a block context on an otherwise inline element.
BLOCK_CLASSES = frozenset({"d-block", "btn-block"})


class DebugAttributes:
    """Provenance attributes written by the helper layer."""
    CLASS_ADDED = "data-bte-added-class"
    CLASS_REMOVED = "data-bte-removed-class"
    SOURCE = "data-bte-src"

    ALL = (CLASS_ADDED, CLASS_REMOVED, SOURCE)


class StyleVariables:
    """Sass variables read from the main stylesheet."""
    COLUMNS = "grid-columns"
    CONTAINER_WIDTH = "container-max-width"


DEFAULT_VARIABLES = {
    StyleVariables.COLUMNS: 12,
    StyleVariables.CONTAINER_WIDTH: 600,
}

# Comments which hide their content from Outlook's Word renderer.
MSO_EXCLUDE_START = "[if !mso]><!"
MSO_EXCLUDE_END = "<![endif]"

PREVIEW_LENGTH = 100
NBSP = "\xa0"
