import xml.etree.ElementTree as ET
from datetime import date

from inkwell.content import Document
from inkwell.feeds import SitemapGenerator

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


def make_doc(doc_id: str, day: date, tags=()) -> Document:
    return Document(
        id=doc_id,
        title=doc_id.title(),
        date=day,
        author="",
        tags=tuple(tags),
        summary="",
        raw_body="",
        rendered_body="",
        reading_time_minutes=1,
        formatted_date=day.isoformat(),
        url=f"/posts/{doc_id}/",
    )


def test_sitemap_lists_fixed_pages_documents_and_tags():
    docs = [make_doc("second", date(2024, 2, 1), ["a&b"]), make_doc("first", date(2024, 1, 1))]
    xml = SitemapGenerator("https://example.com/").generate(docs, {"a&b": docs[:1]})

    root = ET.fromstring(xml)
    entries = [
        (
            url.findtext("sm:loc", namespaces=NS),
            url.findtext("sm:lastmod", namespaces=NS),
            url.findtext("sm:priority", namespaces=NS),
        )
        for url in root.findall("sm:url", NS)
    ]
    assert entries == [
        ("https://example.com/", None, "1.0"),
        ("https://example.com/about/", None, "0.8"),
        ("https://example.com/posts/second/", "2024-02-01", "0.7"),
        ("https://example.com/posts/first/", "2024-01-01", "0.7"),
        ("https://example.com/tags/a%26b/", None, "0.5"),
    ]
    assert xml.endswith("</urlset>\n")


def test_sitemap_escapes_locations():
    xml = SitemapGenerator("https://example.com/?a=1&b=2").generate([], {})
    assert "&amp;b=2" in xml
    ET.fromstring(xml)
