"""Project scaffolding for Inkwell.

Key functions:
- init_project: Create the directory structure and starter files of a blog.
- create_post: Create a new post file with a frontmatter stub.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import yaml

from .assets import DEFAULT_STATIC_DIR
from .templates import DEFAULT_TEMPLATES_DIR
from .utils import slugify

logger = logging.getLogger(__name__)

BLOG_DIR = "blog"
PROJECT_DIRS = (
    "content/posts",
    "content/about",
    "templates",
    "css",
    "images",
)

STARTER_CONFIG = {
    "site": {
        "title": "My Inkwell Blog",
        "description": "Notes and articles",
        "language": "en",
        "url": "",
        "copyright": "",
    },
    "navigation": [
        {"label": "Home", "url": "/"},
        {"label": "Tags", "url": "/tags/"},
        {"label": "About", "url": "/about/"},
    ],
    "social": {"links": []},
    "content": {
        "posts_per_page": 10,
        "show_reading_time": True,
        "default_author": "",
        "date_format": "%B %d, %Y",
    },
    "paths": {
        "content_dir": "content",
        "templates_dir": "templates",
        "static_dir": ".",
        "output_dir": "../dist",
    },
}

SAMPLE_POST = """---
title: "Welcome to Inkwell"
date: "{date}"
tags: [inkwell, getting started]
summary: "Your first post, created by inkwell init."
---

# Welcome to Inkwell

This post lives in `content/posts/welcome.md`. Edit it, or create a new post
with:

```bash
inkwell post
```

Then run `inkwell build` to regenerate the site.
"""

ABOUT_PAGE = """---
title: "About"
description: "About this blog"
---

# About

Tell your readers who you are.
"""


@dataclass(frozen=True)
class CreatedPost:
    """Result of create_post.

    Attributes:
        path: File that was written.
        slug: Slug derived from the title, without any collision suffix.
    """

    path: Path
    slug: str


def init_project(target: Path) -> list[Path]:
    """Create a blog project under ``target / "blog"``.

    Existing files are left untouched, so running it twice is harmless.

    Args:
        target: Project directory; created if missing.

    Returns:
        Files that were created.
    """
    blog = target / BLOG_DIR
    for rel in PROJECT_DIRS:
        (blog / rel).mkdir(parents=True, exist_ok=True)

    created: list[Path] = []

    config_path = blog / "config.yaml"
    if _write_new(config_path, yaml.safe_dump(STARTER_CONFIG, sort_keys=False, allow_unicode=True)):
        created.append(config_path)

    for src_path in sorted(DEFAULT_TEMPLATES_DIR.glob("*.html")):
        if _copy_new(src_path, blog / "templates" / src_path.name):
            created.append(blog / "templates" / src_path.name)

    for src_path in sorted((DEFAULT_STATIC_DIR / "css").glob("*.css")):
        if _copy_new(src_path, blog / "css" / src_path.name):
            created.append(blog / "css" / src_path.name)

    post_path = blog / "content" / "posts" / "welcome.md"
    if _write_new(post_path, SAMPLE_POST.format(date=date.today().isoformat())):
        created.append(post_path)

    about_path = blog / "content" / "about" / "index.md"
    if _write_new(about_path, ABOUT_PAGE):
        created.append(about_path)

    for path in created:
        logger.info("Created %s", path)
    return created


def create_post(title: str, blog_dir: Path = Path(BLOG_DIR), today: date | None = None) -> CreatedPost:
    """Create a post file with a frontmatter stub.

    When ``<slug>.md`` already exists, the date is appended as ``_DDMMYY``.

    Args:
        title: Post title.
        blog_dir: Blog directory containing ``content/posts``.
        today: Date used for the frontmatter and the collision suffix.

    Returns:
        CreatedPost with the written path and the slug.

    Raises:
        ValueError: If the title is blank.
        FileExistsError: If the suffixed filename is taken as well.
    """
    title = title.strip()
    if not title:
        raise ValueError("Post title cannot be empty")
    today = today or date.today()
    slug = slugify(title)
    posts_dir = blog_dir / "content" / "posts"
    posts_dir.mkdir(parents=True, exist_ok=True)

    path = posts_dir / f"{slug}.md"
    if path.exists():
        path = posts_dir / f"{slug}_{today.strftime('%d%m%y')}.md"
    if path.exists():
        raise FileExistsError(f"Post already exists: {path}")

    frontmatter = yaml.safe_dump(
        {"title": title, "date": today.isoformat(), "tags": [], "summary": ""},
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=None,
    )
    path.write_text(f"---\n{frontmatter}---\n\n# {title}\n\n", encoding="utf-8")
    return CreatedPost(path=path, slug=slug)


def _write_new(path: Path, text: str) -> bool:
    if path.exists():
        return False
    path.write_text(text, encoding="utf-8")
    return True


def _copy_new(source: Path, dest: Path) -> bool:
    if dest.exists():
        return False
    shutil.copy2(source, dest)
    return True
