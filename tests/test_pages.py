from datetime import date
from pathlib import Path

from inkwell.config import config_from_mapping
from inkwell.content import ContentPipeline, extract_tag_index
from inkwell.pages import PageAssembler
from inkwell.templates import TemplateLoader


def make_assembler(tmp_path: Path, overrides=None, templates=None) -> PageAssembler:
    raw = {
        "site": {"title": "Field Notes", "description": "Notes & links", "url": "https://example.com"},
        "social": {"links": [{"platform": "GitHub", "url": "https://github.com/example"}]},
        "content": {"posts_per_page": 2, "date_format": "%Y-%m-%d"},
    }
    raw.update(overrides or {})
    config = config_from_mapping(raw, tmp_path)
    templates_dir = tmp_path / "templates"
    templates_dir.mkdir(parents=True, exist_ok=True)
    for name, text in (templates or {}).items():
        (templates_dir / f"{name}.html").write_text(text, encoding="utf-8")
    loader = TemplateLoader(config.paths.templates_dir)
    return PageAssembler(config, loader, today=date(2026, 1, 1))


def make_docs(assembler: PageAssembler, count: int):
    pipeline = ContentPipeline(assembler.config.content)
    docs = []
    for i in range(count):
        raw = (
            f"---\ntitle: Post <{i}>\ndate: 2024-01-{i + 1:02d}\n"
            f"tags: [python{', odd' if i % 2 else ''}]\nsummary: Summary {i}\n---\nBody {i}\n"
        )
        docs.append(pipeline.load_document(raw, f"post-{i}.md"))
    return sorted(docs, key=lambda doc: doc.date, reverse=True)


def test_listing_pages_paginate_and_link(tmp_path):
    assembler = make_assembler(tmp_path)
    docs = make_docs(assembler, 5)
    pages = assembler.listing_pages(docs)

    assert [page.path for page in pages] == ["index.html", "page/2/index.html", "page/3/index.html"]
    home = pages[0].content
    assert "<title>Field Notes</title>" in home
    assert 'href="/posts/post-4/"' in home
    assert 'href="/posts/post-3/"' in home
    assert "/posts/post-2/" not in home
    assert 'href="/page/2/"' in home
    assert 'pagination-prev disabled' in home
    assert '<link rel="canonical" href="https://example.com/">' in home

    second = pages[1].content
    assert "<title>Page 2 | Field Notes</title>" in second
    assert 'href="/" class="pagination-item pagination-prev"' in second
    assert 'href="/page/3/" class="pagination-item pagination-next"' in second
    assert 'pagination-current" aria-current="page">2</span>' in second


def test_listing_with_no_documents_still_renders_home(tmp_path):
    assembler = make_assembler(tmp_path)
    pages = assembler.listing_pages([])
    assert [page.path for page in pages] == ["index.html"]
    assert "No posts yet." in pages[0].content
    assert "pagination" not in pages[0].content.split("<main")[1]


def test_document_page_escapes_text_and_shows_metadata(tmp_path):
    assembler = make_assembler(tmp_path)
    doc = make_docs(assembler, 2)[0]
    page = assembler.document_page(doc)

    assert page.path == "posts/post-1/index.html"
    html = page.content
    assert '<h1 class="post-title">Post &lt;1&gt;</h1>' in html
    assert "<title>Post &lt;1&gt; | Field Notes</title>" in html
    assert '<time datetime="2024-01-02">2024-01-02</time>' in html
    assert "1 min read" in html
    assert '<a href="/tags/python/" class="tag">python</a>' in html
    assert '<a href="/tags/odd/" class="tag">odd</a>' in html
    assert "<p>Body 1</p>" in html
    assert '<link rel="canonical" href="https://example.com/posts/post-1/">' in html
    assert 'content="Summary 1"' in html


def test_reading_time_hidden_when_disabled(tmp_path):
    assembler = make_assembler(tmp_path, {"content": {"show_reading_time": False}})
    doc = make_docs(assembler, 1)[0]
    assert "min read" not in assembler.document_page(doc).content
    assert "min read" not in assembler.render_card(doc)


def test_header_and_footer(tmp_path):
    assembler = make_assembler(tmp_path)
    html = assembler.error_page().content
    assert '<a class="site-title" href="/">Field Notes</a>' in html
    assert "Notes &amp; links" in html
    assert '<a href="/tags/">Tags</a>' in html
    assert "© 2026 Field Notes" in html
    assert 'href="https://github.com/example"' in html

    custom = make_assembler(tmp_path / "other", {"site": {"title": "X", "copyright": "All mine"}})
    assert "All mine" in custom.render_footer()


def test_tag_pages_and_index(tmp_path):
    assembler = make_assembler(tmp_path)
    docs = make_docs(assembler, 3)
    tag_index = extract_tag_index(docs)

    pages = {page.path: page.content for page in assembler.tag_pages(tag_index)}
    assert set(pages) == {"tags/python/index.html", "tags/odd/index.html"}
    python_page = pages["tags/python/index.html"]
    assert "Posts tagged: python" in python_page
    assert "3 posts" in python_page
    assert python_page.index("/posts/post-2/") < python_page.index("/posts/post-0/")
    assert "1 post<" in pages["tags/odd/index.html"]

    index = assembler.tag_index_page(tag_index)
    assert index.path == "tags/index.html"
    assert index.content.index("odd (1)") < index.content.index("python (3)")


def test_about_page(tmp_path):
    assembler = make_assembler(tmp_path)
    pipeline = ContentPipeline(assembler.config.content)
    doc = pipeline.load_document(
        "---\ntitle: About me\ndescription: Who writes this\n---\nHello there\n", "index.md"
    )
    page = assembler.about_page(doc)
    assert page.path == "about/index.html"
    assert "<p>Hello there</p>" in page.content
    assert 'content="Who writes this"' in page.content
    assert '<link rel="canonical" href="https://example.com/about/">' in page.content
    assert assembler.about_page(None) is None


def test_error_page(tmp_path):
    page = make_assembler(tmp_path).error_page()
    assert page.path == "404.html"
    assert "<h1>404</h1>" in page.content
    assert "canonical" not in page.content


def test_no_canonical_without_site_url(tmp_path):
    assembler = make_assembler(tmp_path, {"site": {"title": "Local"}})
    doc = make_docs(assembler, 1)[0]
    assert "canonical" not in assembler.document_page(doc).content


def test_project_templates_override_defaults(tmp_path):
    assembler = make_assembler(
        tmp_path,
        templates={
            "post": "<article>{{title}} by {{author}} ({{metadata.mood}}) {{#each tag_list}}#{{name}}{{/each}}</article>",
            "base": "{{content}}",
        },
    )
    pipeline = ContentPipeline(assembler.config.content)
    doc = pipeline.load_document(
        "---\ntitle: Custom\ndate: 2024-01-01\nauthor: Ada\nmood: happy\ntags: [a, b]\n---\nx", "c.md"
    )
    assert assembler.document_page(doc).content == "<article>Custom by Ada (happy) #a#b</article>"


def test_sitemap_page(tmp_path):
    assembler = make_assembler(tmp_path)
    docs = make_docs(assembler, 1)
    page = assembler.sitemap(docs, extract_tag_index(docs))
    assert page.path == "sitemap.xml"
    assert "<loc>https://example.com/posts/post-0/</loc>" in page.content
    assert "<loc>https://example.com/tags/python/</loc>" in page.content
