# tests/services/test_document_services.py
import pytest
from bs4 import BeautifulSoup

from bootstrap_email.constants import DOCTYPE, DebugAttributes
from bootstrap_email.model import CompileOptions, DocumentSource, StyleBundle
from bootstrap_email.services import compile_service
from bootstrap_email.services.compile_service import CompileService
from bootstrap_email.services.document_service import DocumentService
from bootstrap_email.services.head_injection_service import HeadInjectionService


# --- DocumentService ---

def test_parse_fragment_gets_skeleton():
    """Een los fragment krijgt html, head en body."""
    soup = DocumentService.parse("<p>Hello</p>")

    assert soup.html is not None
    assert soup.head is not None
    assert soup.body.p.get_text() == "Hello"
    assert soup.head.parent is soup.html


def test_parse_strips_doctype_and_bom():
    soup = DocumentService.parse("\ufeff<!DOCTYPE html><html><head><title>T</title></head><body>x</body></html>")

    out = DocumentService.serialize(soup)

    assert out.startswith(DOCTYPE + "<html>")
    assert out.count("<!DOCTYPE") == 1
    assert "\ufeff" not in out
    assert "<title>T</title>" in out


def test_parse_document_without_head():
    soup = DocumentService.parse("<html><body><p>x</p></body></html>")

    assert soup.html.contents[0] is soup.head
    assert soup.body.p is not None


def test_parse_none_is_rejected():
    with pytest.raises(ValueError):
        DocumentService.parse(None)


def test_serialize_strips_provenance_unless_asked():
    html = (
        f'<p {DebugAttributes.CLASS_ADDED}="a" {DebugAttributes.CLASS_REMOVED}="b" '
        f'{DebugAttributes.SOURCE}="margin" class="a">x</p>'
    )

    kept = DocumentService.serialize(DocumentService.parse(html), keep_provenance=True)
    stripped = DocumentService.serialize(DocumentService.parse(html))

    assert DebugAttributes.SOURCE in kept
    for attr in DebugAttributes.ALL:
        assert attr not in stripped
    assert 'class="a"' in stripped


# --- HeadInjectionService ---

def test_inject_meta_and_styles():
    soup = DocumentService.parse("<p>x</p>")

    head = HeadInjectionService().inject(soup, "body { margin: 0; }", "@media (max-width: 600px) { p { color: red; } }")

    assert head.find("meta", attrs={"http-equiv": "Content-Type"})["content"] == "text/html; charset=utf-8"
    assert head.find("meta", attrs={"name": "viewport"}) is not None
    styles = head.find_all("style")
    assert [s.string for s in styles] == [
        "body { margin: 0; }",
        "@media (max-width: 600px) { p { color: red; } }",
    ]


def test_inject_skips_empty_styles():
    soup = DocumentService.parse("<p>x</p>")

    head = HeadInjectionService().inject(soup, "", "   ")

    assert head.find_all("style") == []
    assert len(head.find_all("meta")) == 2


def test_inject_creates_missing_head():
    soup = BeautifulSoup("<html><body>x</body></html>", "html.parser")

    head = HeadInjectionService().inject(soup)

    assert soup.html.contents[0] is head


# --- CompileService ---

@pytest.fixture
def options():
    return CompileOptions(keep_provenance=False, preview_length=100, container_width_fallback=True)


def test_compile_service_runs_the_pipeline(options):
    """Een document gaat door alle stappen: passes, inlinen, head, serialiseren."""
    bundle = StyleBundle(css="p { color: #123456; }", head_rules="a:hover { color: red; }")
    service = CompileService(bundle, ".head-rule { color: blue; }", {"grid-columns": 12}, options)

    result = service.compile(DocumentSource(name="mail.html", html='<p class="mx-auto">Hi</p>'))

    assert result.ok
    assert result.name == "mail.html"
    assert result.document.startswith(DOCTYPE)
    assert 'style="color: #123456;"' in result.document
    assert ".head-rule" in result.document
    assert "a:hover" in result.document
    assert "bte-center" in result.document
    assert "data-bte-" not in result.document


def test_compile_service_reports_warnings(options):
    service = CompileService(StyleBundle(), "", {}, options)

    result = service.compile(DocumentSource(html='<span class="mt-2">x</span>'))

    assert result.ok
    assert [w.code for w in result.warnings] == ["INLINE_MARGIN"]


def test_compile_service_isolates_failures(options, monkeypatch):
    """Een fout in één document wordt gerapporteerd in plaats van opgegooid."""
    def boom(self, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(compile_service.ContentCompiler, "compile", boom)
    service = CompileService(StyleBundle(), "", {}, options)

    result = service.compile(DocumentSource(name="bad.html", html="<p>x</p>"))

    assert not result.ok
    assert result.error == "boom"
    assert result.document is None
