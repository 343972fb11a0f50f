from pathlib import Path

from PIL import Image

from inkwell.assets import AssetCopier


def create_static(tmp_path: Path) -> Path:
    static = tmp_path / "blog"
    (static / "css").mkdir(parents=True)
    (static / "js" / "vendor").mkdir(parents=True)
    (static / "images").mkdir()
    (static / "content").mkdir()
    (static / "css" / "custom.css").write_text("a { color: blue; }", encoding="utf-8")
    (static / "js" / "vendor" / "lib.js").write_text("function f(){}", encoding="utf-8")
    Image.new("RGB", (2, 2), color="red").save(static / "images" / "logo.png")
    (static / ".nojekyll").write_text("", encoding="utf-8")
    (static / "_redirects").write_text("/old /new 301\n", encoding="utf-8")
    (static / "content" / "post.md").write_text("# not an asset", encoding="utf-8")
    (static / "notes.txt").write_text("not copied", encoding="utf-8")
    return static


def test_copies_asset_folders_and_root_files(tmp_path):
    static = create_static(tmp_path)
    out = tmp_path / "dist"
    written = AssetCopier(static, out).run()

    assert (out / "css" / "custom.css").read_text(encoding="utf-8") == "a { color: blue; }"
    assert (out / "js" / "vendor" / "lib.js").is_file()
    assert (out / ".nojekyll").is_file()
    assert (out / "_redirects").read_text(encoding="utf-8") == "/old /new 301\n"
    with Image.open(out / "images" / "logo.png") as img:
        assert img.size == (2, 2)
    assert not (out / "content").exists()
    assert not (out / "notes.txt").exists()
    assert out / "images" / "logo.png" in written


def test_default_stylesheet_is_copied_and_can_be_overridden(tmp_path):
    static = create_static(tmp_path)
    out = tmp_path / "dist"
    AssetCopier(static, out).run()
    assert (out / "css" / "style.css").is_file()

    (static / "css" / "style.css").write_text("body {}", encoding="utf-8")
    AssetCopier(static, out).run()
    assert (out / "css" / "style.css").read_text(encoding="utf-8") == "body {}"


def test_missing_static_dir_copies_only_defaults(tmp_path):
    out = tmp_path / "dist"
    written = AssetCopier(tmp_path / "nowhere", out).run()
    assert written == [out / "css" / "style.css"]


def test_static_dir_equal_to_output_is_skipped(tmp_path):
    static = create_static(tmp_path)
    written = AssetCopier(static, static, defaults_dir=tmp_path / "no-defaults").run()
    assert written == []
