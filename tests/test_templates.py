import logging

import pytest

from inkwell.cache import BoundedCache
from inkwell.templates import DEFAULT_TEMPLATES_DIR, TemplateLoader


def make_dirs(tmp_path):
    project = tmp_path / "templates"
    defaults = tmp_path / "defaults"
    project.mkdir()
    defaults.mkdir()
    (defaults / "post.html").write_text("default {{title}}", encoding="utf-8")
    (defaults / "base.html").write_text("<body>{{content}}</body>", encoding="utf-8")
    return project, defaults


def test_project_template_overrides_default(tmp_path):
    project, defaults = make_dirs(tmp_path)
    (project / "post.html").write_text("custom {{title}}", encoding="utf-8")
    loader = TemplateLoader(project, defaults_dir=defaults)
    assert loader.load("post") == "custom {{title}}"
    assert loader.load("base") == "<body>{{content}}</body>"


def test_missing_template_logs_and_returns_empty(tmp_path, caplog):
    project, defaults = make_dirs(tmp_path)
    loader = TemplateLoader(project, defaults_dir=defaults)
    caplog.set_level(logging.ERROR, logger="inkwell.templates")
    assert loader.load("nope") == ""
    assert loader.render("nope", {"x": 1}) == ""
    assert "Template 'nope' not found" in caplog.text


def test_loader_without_project_dir_uses_defaults(tmp_path):
    _, defaults = make_dirs(tmp_path)
    loader = TemplateLoader(None, defaults_dir=defaults)
    assert loader.candidates("post") == [defaults / "post.html"]
    assert loader.render("post", {"title": "Hi"}) == "default Hi"


def test_loaded_templates_are_cached(tmp_path):
    project, defaults = make_dirs(tmp_path)
    template = project / "post.html"
    template.write_text("first", encoding="utf-8")
    loader = TemplateLoader(project, defaults_dir=defaults)
    assert loader.load("post") == "first"
    template.write_text("second", encoding="utf-8")
    assert loader.load("post") == "first"


def test_cache_can_be_disabled(tmp_path):
    project, defaults = make_dirs(tmp_path)
    template = project / "post.html"
    template.write_text("first", encoding="utf-8")
    loader = TemplateLoader(project, defaults_dir=defaults, cache_enabled=False)
    assert loader.load("post") == "first"
    template.write_text("second", encoding="utf-8")
    assert loader.load("post") == "second"
    assert len(loader.cache) == 0


def test_builtin_templates_are_shipped():
    for name in (
        "base",
        "header",
        "footer",
        "listing",
        "post",
        "post-card",
        "tag",
        "tags",
        "tags-index",
        "pagination",
        "about",
        "error",
    ):
        assert (DEFAULT_TEMPLATES_DIR / f"{name}.html").is_file(), name


def test_bounded_cache_evicts_oldest_insert():
    cache = BoundedCache(2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_bounded_cache_get_or_compute():
    cache = BoundedCache(4)
    calls = []

    def compute():
        calls.append(1)
        return "value"

    assert cache.get_or_compute("k", compute) == "value"
    assert cache.get_or_compute("k", compute) == "value"
    assert calls == [1]


def test_bounded_cache_rejects_bad_size():
    with pytest.raises(ValueError):
        BoundedCache(0)
