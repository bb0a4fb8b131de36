import json
from pathlib import Path

from click.testing import CliRunner

from zyros.build import BuildResult
from zyros.cli import PromptSession, cli
from zyros.validation import ValidationResult


class FakeSession(PromptSession):
    """Prompt session answering from a list instead of the terminal."""

    def __init__(self, answers):
        super().__init__()
        self.answers = list(answers)
        self.asked = []

    def text(self, message, default="", required=False):
        self.asked.append(message)
        answer = self.answers.pop(0)
        return answer if answer is not None else default

    def multiline(self, message):
        self.asked.append(message)
        return self.answers.pop(0)

    def confirm(self, message, default=False):
        self.asked.append(message)
        return self.answers.pop(0)


def write_site(project: Path, pages=None, **site):
    info = {"title": "Test", "description": "Desc", "theme": "light"}
    info.update(site)
    data = {
        "site": info,
        "pages": pages
        if pages is not None
        else [
            {"title": "About", "slug": "about", "content": "About us", "category": "page"},
            {"title": "Hello", "slug": "hello", "content": "Hi", "tags": ["intro"]},
        ],
    }
    path = project / "public" / "site.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def read_site(project: Path):
    return json.loads((project / "public" / "site.json").read_text(encoding="utf-8"))


def test_cli_new_scaffolds_project(tmp_path):
    runner = CliRunner()
    target = tmp_path / "my-blog"
    result = runner.invoke(cli, ["new", str(target)])
    assert result.exit_code == 0, result.output
    data = read_site(target)
    assert data["site"]["title"] == "My Blog"
    assert data["pages"] == []
    assert (target / "zyros.yaml").exists()

    result = runner.invoke(cli, ["new", str(target)])
    assert result.exit_code != 0
    assert "non-empty" in result.output


def test_cli_validate(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = runner.invoke(cli, ["validate"])
    assert result.exit_code == 0
    assert "All validations passed!" in result.output
    assert "Pages: 2" in result.output

    write_site(
        tmp_path,
        pages=[
            {"title": "A", "slug": "a", "content": "x"},
            {"title": "B", "slug": "a", "content": "Broken **bold"},
        ],
        theme="sparkly",
    )
    result = runner.invoke(cli, ["validate"])
    assert result.exit_code == 1
    assert 'Page 2: Duplicate slug "a"' in result.output
    assert "Unmatched bold syntax on line 1" in result.output
    assert 'Unknown theme "sparkly"' in result.output


def test_cli_validate_reports_document_missing_pages(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    path = write_site(tmp_path)
    path.write_text('{"site": {"title": "T", "description": "D"}}', encoding="utf-8")
    result = runner.invoke(cli, ["validate"])
    assert result.exit_code == 1
    assert "Pages must be an array" in result.output


def test_cli_validate_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["validate"])
    assert result.exit_code == 1


def test_cli_build(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    monkeypatch.delenv("SITE_URL", raising=False)
    result = runner.invoke(cli, ["build", "--base-url", "https://example.com"])
    assert result.exit_code == 0, result.output
    assert "Built sitemap.xml, rss.xml for 2 pages" in result.output
    rss = (tmp_path / "dist" / "rss.xml").read_text(encoding="utf-8")
    assert "https://example.com/about" in rss


def test_cli_build_passes_options(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    called = {}

    def fake_build_site(root, base_url=None, output_dir_override=None, strict=None, now=None):
        called.update(base_url=base_url, output=output_dir_override, strict=strict)
        from zyros.schema import default_document

        return BuildResult(
            doc=default_document(),
            output_dir=root / "out",
            base_url=base_url,
            validation=ValidationResult(),
            generated=["rss.xml"],
        )

    monkeypatch.setattr("zyros.build.build_site", fake_build_site)
    result = CliRunner().invoke(
        cli, ["build", "--base-url", "https://x.org", "--output", "out", "--no-strict"]
    )
    assert result.exit_code == 0, result.output
    assert called == {"base_url": "https://x.org", "output": Path("out"), "strict": False}


def test_cli_build_fails_on_validation_errors(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(
        tmp_path,
        pages=[
            {"title": "A", "slug": "a", "content": "x"},
            {"title": "B", "slug": "a", "content": "y"},
        ],
    )
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed" in result.output
    assert 'Duplicate slug "a"' in result.output
    assert not (tmp_path / "dist").exists()


def test_cli_create_with_options(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = CliRunner().invoke(
        cli,
        [
            "create",
            "--title",
            "New Post!",
            "--content",
            "Some words here",
            "--tags",
            "a, b,,",
            "--category",
            "blog",
            "--featured",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Slug: new-post" in result.output
    page = read_site(tmp_path)["pages"][0]
    assert page["slug"] == "new-post"
    assert page["tags"] == ["a", "b"]
    assert page["featured"] is True
    assert page["readingTime"] == 1
    assert "draft" not in page


def test_cli_create_duplicate_slug(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = CliRunner().invoke(
        cli, ["create", "--title", "About", "--content", "Again"]
    )
    assert result.exit_code == 1
    assert 'slug "about" already exists' in result.output
    assert len(read_site(tmp_path)["pages"]) == 2


def test_cli_create_interactive(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    session = FakeSession(["Interactive Post", None, "Desc", "", "x, y", "Body text"])
    result = CliRunner().invoke(cli, ["create"], obj={"session": session})
    assert result.exit_code == 0, result.output
    page = read_site(tmp_path)["pages"][0]
    assert page["slug"] == "interactive-post"
    assert page["description"] == "Desc"
    assert "category" not in page
    assert page["tags"] == ["x", "y"]
    assert page["content"] == "Body text"


def test_cli_create_refuses_invalid_document(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(
        tmp_path,
        pages=[
            {"title": "A", "slug": "a", "content": "x"},
            {"title": "B", "slug": "a", "content": "y"},
        ],
    )
    result = CliRunner().invoke(cli, ["create", "--title", "T", "--content", "c"])
    assert result.exit_code == 1
    assert "zyros validate" in result.output


def test_cli_list_and_stats(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "1. About" in result.output
    assert "Tags: intro" in result.output
    assert "Total: 2 pages" in result.output

    result = runner.invoke(cli, ["stats"])
    assert result.exit_code == 0
    assert "Total Pages: 2" in result.output
    assert "- page: 1 pages" in result.output
    assert "- intro: 1 pages" in result.output


def test_cli_list_empty_and_missing(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    assert runner.invoke(cli, ["list"]).exit_code == 1
    write_site(tmp_path, pages=[])
    result = runner.invoke(cli, ["list"])
    assert "No pages found." in result.output


def test_cli_delete(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)

    result = runner.invoke(cli, ["delete", "hello", "--yes"])
    assert result.exit_code == 0, result.output
    assert [p["slug"] for p in read_site(tmp_path)["pages"]] == ["about"]

    result = runner.invoke(cli, ["delete", "missing", "--yes"])
    assert result.exit_code == 1
    assert 'No page with slug "missing"' in result.output

    result = runner.invoke(cli, ["delete"])
    assert result.exit_code == 2


def test_cli_delete_by_index_with_confirmation(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)

    result = runner.invoke(cli, ["delete", "--index", "1"], obj={"session": FakeSession([False])})
    assert "Operation cancelled." in result.output
    assert len(read_site(tmp_path)["pages"]) == 2

    result = runner.invoke(cli, ["delete", "--index", "1"], obj={"session": FakeSession([True])})
    assert result.exit_code == 0, result.output
    assert 'Page "About" deleted' in result.output
    assert [p["slug"] for p in read_site(tmp_path)["pages"]] == ["hello"]

    result = runner.invoke(cli, ["delete", "--index", "5", "--yes"])
    assert result.exit_code == 1


def test_cli_config(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)

    result = runner.invoke(cli, ["config", "--theme", "dark"])
    assert result.exit_code == 0, result.output
    site = read_site(tmp_path)["site"]
    assert site["theme"] == "dark"
    assert site["title"] == "Test"

    session = FakeSession(["Renamed", "", ""])
    result = runner.invoke(cli, ["config"], obj={"session": session})
    assert result.exit_code == 0, result.output
    site = read_site(tmp_path)["site"]
    assert site == {"title": "Renamed", "description": "Desc", "theme": "dark"}

    result = runner.invoke(cli, ["config", "--theme", "plaid"])
    assert result.exit_code == 2


def test_cli_export_markdown(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = CliRunner().invoke(cli, ["export-markdown"])
    assert result.exit_code == 0, result.output
    assert "Exported 2 pages" in result.output
    assert (tmp_path / "content" / "pages" / "about.md").exists()
    assert (tmp_path / "content" / "pages" / "hello.md").exists()


def test_module_main_entrypoint():
    from zyros.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import zyros.cli as cli_mod

    called = {}

    def fake_cli():
        called["ran"] = True

    original_cli = cli_mod.cli
    cli_mod.cli = fake_cli
    try:
        cli_mod.main()
    finally:
        cli_mod.cli = original_cli
    assert called["ran"]


def test_cli_delete_index_out_of_range_reports_given_number(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    for index in ("0", "3"):
        result = runner.invoke(cli, ["delete", "--index", index, "--yes"])
        assert result.exit_code == 1
        assert f"No page at index {index}" in result.output
    assert len(read_site(tmp_path)["pages"]) == 2


def test_cli_list_filters(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(
        tmp_path,
        pages=[
            {"title": "Old", "slug": "old", "content": "x", "publishedAt": "2023-01-01", "tags": ["news"]},
            {"title": "Draft", "slug": "draft", "content": "x", "draft": True, "category": "blog"},
            {"title": "New", "slug": "new", "content": "x", "publishedAt": "2024-06-01", "featured": True},
        ],
    )
    result = runner.invoke(cli, ["list", "--tag", "news"])
    assert "1. Old" in result.output
    assert "New" not in result.output
    assert "Total: 1 pages" in result.output

    result = runner.invoke(cli, ["list", "--drafts"])
    assert "2. Draft" in result.output
    assert "Old" not in result.output

    result = runner.invoke(cli, ["list", "--published", "--category", "blog"])
    assert "No pages found." in result.output

    result = runner.invoke(cli, ["list", "--featured"])
    assert "3. New" in result.output
    assert "Total: 1 pages" in result.output

    result = runner.invoke(cli, ["list", "--latest", "2"])
    assert result.output.index("3. New") < result.output.index("2. Draft")
    assert "Old" not in result.output


def test_cli_edit_with_options(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    result = runner.invoke(
        cli,
        ["edit", "hello", "--new-slug", "greetings", "--title", "Greetings", "--tags", "a, b", "--draft"],
    )
    assert result.exit_code == 0, result.output
    assert "Slug: greetings" in result.output
    pages = read_site(tmp_path)["pages"]
    assert [p["slug"] for p in pages] == ["about", "greetings"]
    assert pages[1]["title"] == "Greetings"
    assert pages[1]["tags"] == ["a", "b"]
    assert pages[1]["draft"] is True

    result = runner.invoke(cli, ["edit", "greetings", "--new-slug", "about"])
    assert result.exit_code == 1
    assert 'slug "about" already exists' in result.output

    result = runner.invoke(cli, ["edit", "missing", "--title", "x"])
    assert result.exit_code == 1
    assert 'No page with slug "missing"' in result.output


def test_cli_edit_interactive(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    session = FakeSession([None, "Short hello", "x, y"])
    result = CliRunner().invoke(cli, ["edit", "hello"], obj={"session": session})
    assert result.exit_code == 0, result.output
    page = read_site(tmp_path)["pages"][1]
    assert page["title"] == "Hello"
    assert page["description"] == "Short hello"
    assert page["tags"] == ["x", "y"]


def test_cli_import_markdown(tmp_path, monkeypatch):
    runner = CliRunner()
    monkeypatch.chdir(tmp_path)
    write_site(tmp_path)
    assert runner.invoke(cli, ["export-markdown"]).exit_code == 0
    hello = tmp_path / "content" / "pages" / "hello.md"
    hello.write_text(hello.read_text(encoding="utf-8").replace("Hi", "Hi again"), encoding="utf-8")
    posts = tmp_path / "content" / "posts"
    posts.mkdir()
    (posts / "new-post.md").write_text("---\ntitle: New Post\n---\nFresh body", encoding="utf-8")

    result = runner.invoke(cli, ["import-markdown"])
    assert result.exit_code == 0, result.output
    assert "Imported 3 pages (1 added, 2 replaced)" in result.output
    pages = read_site(tmp_path)["pages"]
    assert [p["slug"] for p in pages] == ["about", "hello", "new-post"]
    assert pages[1]["content"] == "Hi again"


def test_cli_import_markdown_refuses_invalid_result(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write_site(tmp_path)
    before = path.read_text(encoding="utf-8")
    pages_dir = tmp_path / "content" / "pages"
    pages_dir.mkdir(parents=True)
    (pages_dir / "bad.md").write_text("---\ntitle: Bad\nslug: Bad Slug\n---\nBody", encoding="utf-8")
    result = CliRunner().invoke(cli, ["import-markdown"])
    assert result.exit_code == 1
    assert "Import failed" in result.output
    assert path.read_text(encoding="utf-8") == before
