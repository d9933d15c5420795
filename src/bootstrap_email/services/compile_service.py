# src/bootstrap_email/services/compile_service.py
from __future__ import annotations

import logging
from typing import Dict, List

from bootstrap_email.constants import DEFAULT_VARIABLES, StyleVariables
from bootstrap_email.dom.content_compiler import ContentCompiler
from bootstrap_email.model import CompiledDocument, CompileOptions, CompileWarning, DocumentSource, StyleBundle
from bootstrap_email.services.css_inline_service import CssInlineService
from bootstrap_email.services.document_service import DocumentService
from bootstrap_email.services.head_injection_service import HeadInjectionService

logger = logging.getLogger(__name__)


class CompileService:
    """
    Compiles single documents: rewrite passes, css inlining, head injection, serialization.
    Holds no per-document state, so one instance serves a whole batch.
    """

    def __init__(
            self,
            style: StyleBundle,
            head_css: str,
            variables: Dict[str, int],
            options: CompileOptions,
    ):
        self.style = style
        self.head_css = head_css
        self.options = options
        self.columns = int(variables.get(StyleVariables.COLUMNS, DEFAULT_VARIABLES[StyleVariables.COLUMNS]))
        self.container_width = int(
            variables.get(StyleVariables.CONTAINER_WIDTH, DEFAULT_VARIABLES[StyleVariables.CONTAINER_WIDTH])
        )
        self._inliner = CssInlineService(style.css)
        self._head = HeadInjectionService()

    def compile(self, source: DocumentSource) -> CompiledDocument:
        """
        Compiles one document. Failures are logged and reported on the result
        instead of being raised, so sibling documents are not affected.
        """
        label = source.name or "<html>"
        logger.debug("Start compiling %s", label)
        warnings: List[CompileWarning] = []

        try:
            soup = DocumentService.parse(source.html)

            compiler = ContentCompiler(soup)
            warnings = compiler.warnings
            compiler.compile(
                columns=self.columns,
                container_width=self.container_width,
                container_width_fallback=self.options.container_width_fallback,
                preview_length=self.options.preview_length,
            )

            self._inliner.inline(soup)
            self._head.inject(soup, self.head_css, self.style.head_rules)
            document = DocumentService.serialize(soup, keep_provenance=self.options.keep_provenance)
        except Exception as e:
            logger.error("Failed to compile %s: %s", label, e, exc_info=True)
            return CompiledDocument(name=source.name, warnings=warnings, error=str(e))

        logger.debug("%s compiled with %d warning(s)", label, len(warnings))
        return CompiledDocument(name=source.name, document=document, warnings=warnings)
