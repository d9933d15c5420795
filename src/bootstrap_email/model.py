# src/bootstrap_email/model.py
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from bootstrap_email.core.managers.config_manager import config_manager


class CompileWarning(BaseModel):
    """
    A recoverable problem found while rewriting a document.
    The element is left as it was (or rewritten best-effort) and compilation continues.
    """
    code: str
    message: str
    tag: Optional[str] = None
    classes: List[str] = Field(default_factory=list)


class CompileOptions(BaseModel):
    """
    Options for a compile run. Every field defaults to the matching entry in settings.json.
    """
    style: Optional[Path] = Field(default_factory=lambda: config_manager.get_nested("style.main"))
    head: Optional[Path] = Field(default_factory=lambda: config_manager.get_nested("style.head"))
    # Explicit values for style variables; these win over the stylesheet.
    variables: Dict[str, int] = Field(default_factory=dict)
    container_width_fallback: bool = Field(
        default_factory=lambda: bool(config_manager.get_nested("compiler.container_width_fallback", True))
    )
    preview_length: int = Field(
        default_factory=lambda: int(config_manager.get_nested("compiler.preview_length", 100))
    )
    keep_provenance: bool = Field(
        default_factory=lambda: bool(config_manager.get_nested("debug.provenance", False))
    )
    workers: int = Field(default_factory=lambda: int(config_manager.get_nested("compiler.workers", 1)))
    show_progress: bool = Field(
        default_factory=lambda: bool(config_manager.get_nested("compiler.show_progress", False))
    )

    @field_validator("workers", "preview_length")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("variables")
    @classmethod
    def positive_variables(cls, v: Dict[str, int]) -> Dict[str, int]:
        for name, value in v.items():
            if value < 1:
                raise ValueError(f"{name} must be at least 1")
        return v


class StyleBundle(BaseModel):
    """Result of processing a stylesheet."""
    css: str = ""
    # Rules that cannot be inlined (media queries, pseudo-classes, ...)
    head_rules: str = ""
    variables: Dict[str, int] = Field(default_factory=dict)


class DocumentSource(BaseModel):
    """A document waiting to be compiled. `name` is the file name, None for raw HTML input."""
    name: Optional[str] = None
    html: str


class CompiledDocument(BaseModel):
    name: Optional[str] = None
    document: Optional[str] = None
    warnings: List[CompileWarning] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None
