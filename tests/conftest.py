"""Shared fixtures: a small single-page application tree."""

import pytest


@pytest.fixture
def site(tmp_path):
    """A served tree with an index document, two asset directories, and
    directories discovery must skip."""
    base = tmp_path / "site"
    base.mkdir()
    (base / "index.html").write_text("<html><body><h1>Home</h1></body></html>")
    (base / "robots.txt").write_text("User-agent: *")

    app = base / "app"
    app.mkdir()
    (app / "main.js").write_text("console.log('app');")
    (app / "theme.up").write_text("shout me")

    vendor = base / "vendor"
    vendor.mkdir()
    (vendor / "lib.js").write_text("var lib = 1;")

    for skipped in (".git", "node_modules", "tests"):
        (base / skipped).mkdir()

    (tmp_path / "secret.txt").write_text("outside the tree")
    return base
