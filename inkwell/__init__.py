"""Inkwell static blog generator.

This package turns a folder of Markdown posts into a static HTML blog.
It ships a small directive-based template language, a content pipeline with
reading time and tag indexing, pagination, and a build orchestrator that
writes every page type of the site.

The main entry point is the CLI module, which provides commands for
scaffolding a blog, creating posts, building and previewing the site.
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
