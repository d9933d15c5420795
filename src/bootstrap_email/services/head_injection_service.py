# src/bootstrap_email/services/head_injection_service.py
import logging

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


class HeadInjectionService:
    """Appends the meta tags and the not-inlineable css to the document head."""

    def inject(self, soup: BeautifulSoup, head_css: str = "", head_rules: str = "") -> Tag:
        """
        Args:
            soup (BeautifulSoup): The document; a <head> is created when missing.
            head_css (str): Content of the dedicated head stylesheet.
            head_rules (str): Rules extracted from the main stylesheet (media queries, pseudo-classes).

        Returns:
            Tag: The document's head.
        """
        head = self._ensure_head(soup)

        head.append(soup.new_tag("meta", attrs={
            "http-equiv": "Content-Type",
            "content": "text/html; charset=utf-8",
        }))
        head.append(soup.new_tag("meta", attrs={
            "name": "viewport",
            "content": "width=device-width, initial-scale=1",
        }))

        for css in (head_css, head_rules):
            if css and css.strip():
                style = soup.new_tag("style", attrs={"type": "text/css"})
                style.string = css
                head.append(style)

        return head

    @staticmethod
    def _ensure_head(soup: BeautifulSoup) -> Tag:
        if soup.head is not None:
            return soup.head

        head = soup.new_tag("head")
        html = soup.find("html")
        if html is not None:
            html.insert(0, head)
        else:
            soup.insert(0, head)
        logger.debug("Document had no <head>, created one.")
        return head
