# src/bootstrap_email/services/document_service.py
import logging

from bs4 import BeautifulSoup, Doctype

from bootstrap_email.constants import DOCTYPE, DebugAttributes

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Parses and serializes documents.
    Parsed documents always have the html > head + body skeleton the passes rely on.
    """

    PARSER = "html.parser"

    @staticmethod
    def parse(html: str) -> BeautifulSoup:
        if html is None:
            raise ValueError("HTML content cannot be None.")

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        soup = BeautifulSoup(clean_html, DocumentService.PARSER)

        # The compiled document gets its own doctype on output.
        for item in list(soup.contents):
            if isinstance(item, Doctype):
                item.extract()

        DocumentService._ensure_skeleton(soup)
        return soup

    @staticmethod
    def _ensure_skeleton(soup: BeautifulSoup) -> None:
        html = soup.find("html")
        if html is None:
            html = soup.new_tag("html")
            for node in list(soup.contents):
                html.append(node)
            soup.append(html)

        head = html.find("head")
        if head is None:
            head = soup.new_tag("head")
            html.insert(0, head)

        if html.find("body") is None:
            body = soup.new_tag("body")
            for node in [n for n in html.contents if n is not head]:
                body.append(node)
            html.append(body)

    @staticmethod
    def strip_provenance(soup: BeautifulSoup) -> None:
        """Removes the debug attributes written by the rewrite passes."""
        for tag in soup.find_all(True):
            for attr in DebugAttributes.ALL:
                if attr in tag.attrs:
                    del tag[attr]

    @staticmethod
    def serialize(soup: BeautifulSoup, keep_provenance: bool = False) -> str:
        if not keep_provenance:
            DocumentService.strip_provenance(soup)
        return DOCTYPE + soup.decode()
