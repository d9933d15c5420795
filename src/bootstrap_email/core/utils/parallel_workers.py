# src/bootstrap_email/core/utils/parallel_workers.py
import logging
from typing import Dict, Optional

from bootstrap_email.model import CompileOptions, DocumentSource, StyleBundle
from bootstrap_email.services.compile_service import CompileService

logger = logging.getLogger(__name__)


def compile_document_worker(
    source: DocumentSource,
    style: StyleBundle,
    head_css: str,
    variables: Dict[str, int],
    options: CompileOptions,
) -> Optional[str]:
    """
    Worker function compiling one document in a separate process.
    Returns the CompiledDocument as a JSON string (or None on error).
    """
    if not source.html:
        logger.debug(f"Worker skip document {source.name}: Missing content.")
        return None

    try:
        service = CompileService(style, head_css, variables, options)
        # Serialize to JSON to avoid complex pickling on Windows spawn
        return service.compile(source).model_dump_json()

    except Exception as e:
        logger.error(f"WORKER ERROR compiling document {source.name}: {e}", exc_info=True)
        return None
