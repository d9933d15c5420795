# tests/services/test_css_inline_service.py
from bs4 import BeautifulSoup

from bootstrap_email.services.css_inline_service import CssInlineService


def inline(css: str, html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    CssInlineService(css).inline(soup)
    return soup


def test_rules_are_inlined():
    soup = inline("p { color: #123456; font-size: 14px; }", "<p>x</p>")
    assert soup.p["style"] == "color: #123456; font-size: 14px;"


def test_specificity_beats_source_order():
    """Een klasse-selector wint van een element-selector, ook als die later komt."""
    soup = inline(".lead { color: blue; } p { color: black; }", '<p class="lead">x</p>')
    assert soup.p["style"] == "color: blue;"


def test_later_rule_wins_on_equal_specificity():
    soup = inline(".a { color: blue; } .b { color: black; }", '<p class="a b">x</p>')
    assert soup.p["style"] == "color: black;"


def test_existing_inline_style_wins():
    """Een bestaand style-attribuut gaat voor op het stylesheet."""
    soup = inline("p { color: blue; margin: 0; }", '<p style="color: green">x</p>')
    style = CssInlineService.parse_style(soup.p["style"])
    assert style == {"color": "green", "margin": "0"}


def test_important_rule_beats_inline_style():
    soup = inline("p { color: blue !important; }", '<p style="color: green">x</p>')
    assert CssInlineService.parse_style(soup.p["style"])["color"] == "blue"


def test_table_elements_get_presentational_attributes():
    """Breedtes, kleuren en uitlijning worden ook als attributen gezet."""
    css = (
        ".w-100 { width: 100%; }\n"
        "td { background-color: #123456; text-align: center; vertical-align: top; }\n"
        "img { width: 600px; height: auto; }\n"
    )
    soup = inline(css, '<table class="w-100"><tr><td>x</td></tr></table><img src="a.png">')

    assert soup.table["width"] == "100%"
    assert "align" not in soup.table.attrs
    assert soup.td["bgcolor"] == "#123456"
    assert soup.td["align"] == "center"
    assert soup.td["valign"] == "top"
    assert soup.img["width"] == "600"
    assert "height" not in soup.img.attrs


def test_non_table_elements_only_get_style():
    soup = inline("p { width: 100px; background-color: #123456; }", "<p>x</p>")
    assert "width" not in soup.p.attrs
    assert "bgcolor" not in soup.p.attrs


def test_child_combinator_selectors():
    """De spacer-regels richten zich op de cel van de wrapper-tabel."""
    css = ".sx-3 > tbody > tr > td { padding-left: 16px; padding-right: 16px; }"
    html = '<table class="sx-3"><tbody><tr><td>x</td></tr></tbody></table>'

    soup = inline(css, html)

    assert soup.td["style"] == "padding-left: 16px; padding-right: 16px;"
    assert "style" not in soup.table.attrs


def test_elements_without_matches_are_untouched():
    soup = inline(".missing { color: red; }", "<p>x</p>")
    assert "style" not in soup.p.attrs


def test_inline_style_with_data_uri_survives():
    """Een puntkomma binnen url() breekt het bestaande style-attribuut niet op."""
    html = "<p style=\"background-image: url('data:image/png;base64,AAAA'); color: red\">x</p>"

    soup = inline("p { font-size: 12px; }", html)

    style = CssInlineService.parse_style(soup.p["style"])
    assert style["font-size"] == "12px"
    assert style["color"] == "red"
    assert "data:image/png;base64,AAAA" in style["background-image"]
    assert style["background-image"].startswith("url(")
    assert style["background-image"].endswith(")")


def test_parse_and_serialize_style():
    style = CssInlineService.parse_style("color: red;; Margin : 0 ; invalid")
    assert style == {"color": "red", "margin": "0"}
    assert CssInlineService.serialize_style(style) == "color: red; margin: 0;"
    assert CssInlineService.parse_style(None) == {}
