# src/bootstrap_email/controllers/compile_controller.py
from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from tqdm.auto import tqdm

from bootstrap_email.core.managers.config_manager import config_manager
from bootstrap_email.core.utils.parallel_workers import compile_document_worker
from bootstrap_email.core.utils.path_utils import PathUtils
from bootstrap_email.constants import StyleVariables
from bootstrap_email.exceptions import DocumentSourceError, StyleProcessingError
from bootstrap_email.model import CompiledDocument, CompileOptions, DocumentSource, StyleBundle
from bootstrap_email.services.compile_service import CompileService
from bootstrap_email.services.style_service import StyleService

logger = logging.getLogger(__name__)

TemplateInput = Union[str, Path]


class CompileController:
    """
    Compile entry point.
    Loads the documents, processes the stylesheets once per run and compiles every
    document through the CompileService, either sequentially or on a process pool.
    """

    def __init__(
            self,
            templates: Union[TemplateInput, Sequence[TemplateInput]],
            options: Optional[CompileOptions] = None,
    ) -> None:
        self.options = options or CompileOptions()
        self.sources = self._load_sources(templates)
        self._styles: Optional[Tuple[StyleBundle, str]] = None

    # --- Input ---

    @staticmethod
    def _load_sources(templates) -> List[DocumentSource]:
        """
        Accepts a path, raw HTML, or a list of them.
        Invalid entries are logged and skipped.
        """
        if isinstance(templates, (str, Path)):
            candidates = [templates]
        elif isinstance(templates, (list, tuple)):
            candidates = list(templates)
        else:
            raise DocumentSourceError(
                f"Parameter 'templates' must be a string, a path or a list of them. "
                f"Got: {type(templates).__name__}"
            )

        sources: List[DocumentSource] = []
        for candidate in candidates:
            source = CompileController._load_source(candidate)
            if source is not None:
                sources.append(source)

        logger.debug("Loaded %d of %d document(s).", len(sources), len(candidates))
        return sources

    @staticmethod
    def _load_source(candidate) -> Optional[DocumentSource]:
        if isinstance(candidate, str) and candidate.lstrip().startswith("<"):
            return DocumentSource(html=candidate)

        if not isinstance(candidate, (str, Path)):
            logger.error("Given template is not a string or path. Got: %s", type(candidate).__name__)
            return None

        path = Path(candidate)
        try:
            if path.is_file():
                return DocumentSource(name=path.name, html=path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot read template %s: %s", path, e)
            return None

        logger.error("Given template is not valid html or the file does not exist. Got: %s", candidate)
        return None

    # --- Styles ---

    def _prepare_styles(self) -> Tuple[StyleBundle, str]:
        """Processes the main and head stylesheets once; StyleProcessingError ends the run."""
        if self._styles is not None:
            return self._styles

        service = StyleService()
        main_path = self.options.style or PathUtils.get_default_style_path()
        head_path = self.options.head or PathUtils.get_default_head_path()

        logger.debug("Processing main style %s", main_path)
        bundle = service.process(main_path)

        # The head stylesheet is injected untouched, media queries included.
        logger.debug("Processing head style %s", head_path)
        head_bundle = service.process(head_path)
        head_css = "\n".join(css for css in (head_bundle.css, head_bundle.head_rules) if css)

        self._styles = (bundle, head_css)
        return self._styles

    def resolve_variables(self, bundle: StyleBundle) -> Dict[str, int]:
        """Configured defaults, overridden by stylesheet variables, overridden by explicit options."""
        variables: Dict[str, int] = {
            StyleVariables.COLUMNS: int(config_manager.get_nested("compiler.grid_columns", 12)),
            StyleVariables.CONTAINER_WIDTH: int(config_manager.get_nested("compiler.container_width", 600)),
        }
        variables.update(bundle.variables)
        variables.update({name.lstrip("$"): int(value) for name, value in self.options.variables.items()})

        for name, value in variables.items():
            if value < 1:
                raise StyleProcessingError(f"Style variable ${name} must be at least 1, got {value}")
        return variables

    # --- Compilation ---

    def compile(self) -> List[CompiledDocument]:
        """
        Compiles every loaded document.
        Returns one CompiledDocument per source, in input order; failed documents carry `error`.
        """
        if not self.sources:
            logger.warning("Nothing to compile.")
            return []

        bundle, head_css = self._prepare_styles()
        variables = self.resolve_variables(bundle)
        logger.debug("Style variables: %s", variables)

        start = time.perf_counter()
        if self.options.workers > 1 and len(self.sources) > 1:
            results = self._compile_parallel(bundle, head_css, variables)
        else:
            results = self._compile_sequential(bundle, head_css, variables)

        failed = sum(1 for r in results if not r.ok)
        logger.info(
            "Compiled %d document(s), %d failed, in %.3fs",
            len(results) - failed, failed, time.perf_counter() - start,
        )
        return results

    def _compile_sequential(self, bundle: StyleBundle, head_css: str, variables: Dict[str, int]) -> List[CompiledDocument]:
        service = CompileService(bundle, head_css, variables, self.options)
        iterator = self.sources
        if self.options.show_progress:
            iterator = tqdm(self.sources, desc="Compiling", unit=" doc")
        return [service.compile(source) for source in iterator]

    def _compile_parallel(self, bundle: StyleBundle, head_css: str, variables: Dict[str, int]) -> List[CompiledDocument]:
        results: List[Optional[CompiledDocument]] = [None] * len(self.sources)

        with ProcessPoolExecutor(max_workers=self.options.workers) as pool:
            futures = {
                pool.submit(compile_document_worker, source, bundle, head_css, variables, self.options): index
                for index, source in enumerate(self.sources)
            }
            iterator = as_completed(futures)
            if self.options.show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Compiling", unit=" doc")

            for fut in iterator:
                index = futures[fut]
                name = self.sources[index].name
                try:
                    result_json = fut.result()
                    if not result_json or not isinstance(result_json, str):
                        results[index] = CompiledDocument(name=name, error="Worker returned no result.")
                        continue
                    results[index] = CompiledDocument(**json.loads(result_json))
                except Exception as e:
                    logger.error("Failed to compile document %s: %s", name, e, exc_info=True)
                    results[index] = CompiledDocument(name=name, error=str(e))

        return results

    def compile_and_save(self, output: Union[str, Path]) -> List[CompiledDocument]:
        """
        Compiles and writes the documents.
        A single document goes to `output` as a file unless `output` is an existing directory;
        several documents go into the directory `output`, named after their source.
        """
        results = self.compile()
        output = Path(output)

        if len(results) == 1 and not output.is_dir():
            result = results[0]
            if result.ok:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(result.document, encoding="utf-8")
                logger.info("Written %s", output)
            return results

        for index, result in enumerate(results, start=1):
            if not result.ok:
                continue
            path = PathUtils.get_output_path(output, result.name or f"document-{index}.html")
            path.write_text(result.document, encoding="utf-8")
            logger.info("Written %s", path)

        return results
