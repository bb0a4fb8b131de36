"""Command-line interface for Zyros.

This module defines the CLI commands using Click framework.
Every command works on the project in the current directory.

Commands:
- new: Scaffold a new Zyros project.
- validate: Check public/site.json for errors and warnings.
- build: Write rss.xml and sitemap.xml into the output directory.
- create: Create a new page (prompts for missing fields).
- list: List pages, optionally filtered by tag, category or status.
- delete: Delete a page.
- edit: Change fields of a page.
- config: Update site title, theme or description.
- stats: Show site statistics.
- export-markdown: Write pages as markdown files under content/.
- import-markdown: Read markdown files under content/ back into site.json.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import questionary
import yaml

from . import __version__
from .collections import PageCollection, site_stats
from .exceptions import ValidationError, ZyrosError
from .mutations import create_page, delete_page, update_page, update_site_config
from .schema import THEMES, SiteDocument
from .store import SITE_JSON_PATH, ContentStore
from .utils import slugify, titleize
from .validation import ValidationResult, raise_for_errors, validate


class PromptSession:
    """Interactive prompts for one command invocation.

    Commands receive the session through the Click context object instead of
    sharing a module-level prompt, so tests can swap in their own answers.
    """

    def __init__(self, style: questionary.Style | None = None):
        self.style = style or _questionary_style()

    def text(self, message: str, default: str = "", required: bool = False) -> str:
        validate_fn = (lambda x: len(x.strip()) > 0 or "Value cannot be empty") if required else None
        answer = questionary.text(
            message, default=default, validate=validate_fn, style=self.style
        ).ask()
        if answer is None:
            raise click.Abort()
        return answer.strip()

    def multiline(self, message: str) -> str:
        answer = questionary.text(
            message,
            multiline=True,
            validate=lambda x: len(x.strip()) > 0 or "Content cannot be empty",
            style=self.style,
        ).ask()
        if answer is None:
            raise click.Abort()
        return answer

    def confirm(self, message: str, default: bool = False) -> bool:
        answer = questionary.confirm(message, default=default, style=self.style).ask()
        if answer is None:
            raise click.Abort()
        return answer


@click.group()
@click.version_option(version=__version__, prog_name="zyros")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Zyros static site content tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj.setdefault("session", PromptSession())


@cli.command()
@click.argument("name")
@click.option("--title", help="Site title (defaults to the project name)")
def new(name: str, title: str | None):
    """Scaffold a new Zyros project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    target.mkdir(parents=True, exist_ok=True)
    try:
        ContentStore(target).init_document(title=title or titleize(target.name))
    except ZyrosError as exc:
        raise click.ClickException(str(exc)) from exc
    config = {"output_dir": "dist", "base_url": "", "strict": True}
    (target / "zyros.yaml").write_text(
        yaml.safe_dump(config, sort_keys=False), encoding="utf-8"
    )
    click.echo(f"New Zyros site created at {target}")
    click.echo(click.style(f"  Edit {SITE_JSON_PATH.as_posix()} to change content", fg="bright_black"))


@cli.command(name="validate")
def validate_cmd():
    """Check public/site.json for errors and warnings."""
    store = ContentStore(Path.cwd())
    try:
        raw = store.read_raw()
    except ZyrosError as exc:
        click.echo(click.style("Invalid site.json:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  {exc}", fg="red"), err=True)
        raise SystemExit(1) from None

    result = validate(raw)
    _echo_result(result)
    pages = raw.get("pages")
    click.echo(click.style("\nSummary:", fg="blue"))
    click.echo(f"  Pages: {len(pages) if isinstance(pages, list) else 0}")
    click.echo(f"  Errors: {len(result.errors)}")
    click.echo(f"  Warnings: {len(result.warnings)}")
    if result.errors:
        raise SystemExit(1)


@cli.command()
@click.option("--base-url", help="Public site URL (overrides SITE_URL and zyros.yaml)")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write artifacts to (overrides zyros.yaml output_dir)",
)
@click.option("--no-strict", is_flag=True, help="Build even if validation finds errors")
def build(base_url: str | None, output: Path | None, no_strict: bool):
    """Write rss.xml and sitemap.xml into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(
            project_root,
            base_url=base_url,
            output_dir_override=output,
            strict=False if no_strict else None,
        )
    except ValidationError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        _echo_result(ValidationResult(exc.errors, exc.warnings), err=True)
        raise SystemExit(1) from None
    except ZyrosError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Error: {exc}", fg="white"), err=True)
        raise SystemExit(1) from None
    for warning in result.validation.warnings:
        click.echo(click.style(f"  warning: {warning}", fg="yellow"), err=True)
    click.echo(
        f"Built {', '.join(result.generated)} for {len(result.doc.pages)} pages "
        f"into {result.output_dir}"
    )


@cli.command()
@click.option("--title", help="Page title")
@click.option("--slug", help="Page slug (defaults to the slugified title)")
@click.option("--description", help="Short description")
@click.option("--category", help="Category name")
@click.option("--tags", help="Comma-separated tags")
@click.option("--content", help="Markdown body")
@click.option("--draft", is_flag=True, help="Mark the page as a draft")
@click.option("--featured", is_flag=True, help="Mark the page as featured")
@click.pass_obj
def create(
    obj: dict,
    title: str | None,
    slug: str | None,
    description: str | None,
    category: str | None,
    tags: str | None,
    content: str | None,
    draft: bool,
    featured: bool,
):
    """Create a new page at the top of the page list."""
    session: PromptSession = obj["session"]
    store = ContentStore(Path.cwd())
    doc = _load_valid(store)

    if not title:
        title = session.text("Page title:", required=True)
        slug = session.text("Slug:", default=slugify(title)) or None
        description = description or session.text("Description (optional):") or None
        category = category or session.text("Category (optional):") or None
        tags = tags or session.text("Tags (comma-separated, optional):")
    if not content:
        content = session.multiline("Content (markdown, Esc then Enter to finish):")

    tag_list = _split_tags(tags)
    try:
        updated = create_page(
            doc,
            title=title,
            content=content,
            slug=slug,
            description=description,
            category=category,
            tags=tag_list or None,
            draft=True if draft else None,
            featured=True if featured else None,
        )
        store.save(updated)
    except ZyrosError as exc:
        raise click.ClickException(exc.message) from exc

    page = updated.pages[0]
    click.echo(click.style("Page created", fg="green", bold=True))
    click.echo(f"  Title: {page.title}")
    click.echo(f"  Slug: {page.slug}")
    click.echo(f"  URL: /{page.slug}")


@cli.command(name="list")
@click.option("--tag", help="Only pages with this tag")
@click.option("--category", help="Only pages in this category")
@click.option("--drafts", "status", flag_value="drafts", help="Only draft pages")
@click.option("--published", "status", flag_value="published", help="Only non-draft pages")
@click.option("--featured", is_flag=True, help="Only featured pages")
@click.option("--latest", type=click.IntRange(min=1), help="Newest N pages by publish date")
def list_cmd(
    tag: str | None,
    category: str | None,
    status: str | None,
    featured: bool,
    latest: int | None,
):
    """List pages in document order, optionally filtered.

    Numbers are document positions, as used by ``delete --index``.
    """
    doc = _load(ContentStore(Path.cwd()))
    pages = PageCollection(doc.pages)
    if tag:
        pages = pages.with_tag(tag)
    if category:
        pages = pages.in_category(category)
    if status == "drafts":
        pages = pages.drafts()
    elif status == "published":
        pages = pages.published()
    if featured:
        pages = pages.featured()
    if latest:
        pages = pages.latest(latest)

    if not pages:
        click.echo(click.style("No pages found.", fg="yellow"))
        return
    positions = {id(page): index for index, page in enumerate(doc.pages, start=1)}
    for page in pages:
        click.echo(click.style(f"{positions[id(page)]}. {page.title}", bold=True))
        click.echo(f"   Slug: {page.slug}")
        if page.category:
            click.echo(f"   Category: {page.category}")
        if page.published_at:
            click.echo(f"   Published: {page.published_at}")
        if page.tag_list:
            click.echo(f"   Tags: {', '.join(page.tag_list)}")
    click.echo(click.style(f"\nTotal: {len(pages)} pages", fg="cyan"))


@cli.command()
@click.argument("slug", required=False)
@click.option("--index", type=int, help="1-based position of the page to delete")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(obj: dict, slug: str | None, index: int | None, yes: bool):
    """Delete a page by SLUG or --index."""
    if (slug is None) == (index is None):
        raise click.UsageError("Pass either a SLUG or --index")
    session: PromptSession = obj["session"]
    store = ContentStore(Path.cwd())
    doc = _load_valid(store)

    if index is not None and not 1 <= index <= len(doc.pages):
        raise click.ClickException(
            f"No page at index {index} (the site has {len(doc.pages)} pages)"
        )
    target = slug if slug is not None else index - 1
    try:
        updated = delete_page(doc, target)
    except ZyrosError as exc:
        raise click.ClickException(exc.message) from exc
    removed = doc.find(slug) if slug is not None else doc.pages[index - 1]

    if not yes and not session.confirm(f'Delete "{removed.title}"?'):
        click.echo(click.style("Operation cancelled.", fg="yellow"))
        return
    _save(store, updated)
    click.echo(click.style(f'Page "{removed.title}" deleted', fg="green"))


@cli.command()
@click.argument("slug")
@click.option("--title", help="New title")
@click.option("--new-slug", help="New slug")
@click.option("--description", help="New description")
@click.option("--category", help="New category")
@click.option("--tags", help="Comma-separated tags, replacing the current ones")
@click.option("--content", help="New markdown body")
@click.option("--draft/--no-draft", default=None, help="Mark or unmark as draft")
@click.option("--featured/--no-featured", default=None, help="Mark or unmark as featured")
@click.pass_obj
def edit(
    obj: dict,
    slug: str,
    title: str | None,
    new_slug: str | None,
    description: str | None,
    category: str | None,
    tags: str | None,
    content: str | None,
    draft: bool | None,
    featured: bool | None,
):
    """Change fields of the page with SLUG.

    Without options, prompts for the title, description and tags.
    """
    session: PromptSession = obj["session"]
    store = ContentStore(Path.cwd())
    doc = _load_valid(store)
    page = doc.find(slug)
    if page is None:
        raise click.ClickException(f'No page with slug "{slug}"')

    changes = {
        "title": title,
        "slug": new_slug,
        "description": description,
        "category": category,
        "tags": _split_tags(tags) if tags is not None else None,
        "content": content,
        "draft": draft,
        "featured": featured,
    }
    if all(value is None for value in changes.values()):
        changes["title"] = session.text("Title:", default=str(page.title), required=True)
        changes["description"] = (
            session.text("Description:", default=page.description or "") or None
        )
        answer = session.text("Tags (comma-separated):", default=", ".join(page.tag_list))
        changes["tags"] = _split_tags(answer) or None

    try:
        updated = update_page(doc, slug, **changes)
    except ZyrosError as exc:
        raise click.ClickException(exc.message) from exc
    _save(store, updated)
    click.echo(click.style("Page updated", fg="green", bold=True))
    click.echo(f"  Slug: {new_slug or slug}")


@cli.command()
@click.option("--title", help="New site title")
@click.option("--theme", type=click.Choice(THEMES), help="New theme")
@click.option("--description", help="New site description")
@click.pass_obj
def config(obj: dict, title: str | None, theme: str | None, description: str | None):
    """Update the site title, theme or description."""
    session: PromptSession = obj["session"]
    store = ContentStore(Path.cwd())
    doc = _load_valid(store)

    if not any((title, theme, description)):
        click.echo(f"  Title: {doc.site.title}")
        click.echo(f"  Theme: {doc.site.theme or 'Not set'}")
        click.echo(f"  Description: {doc.site.description or 'Not set'}")
        title = session.text("New title (empty keeps current):")
        theme = session.text("New theme (empty keeps current):")
        description = session.text("New description (empty keeps current):")

    _save(store, update_site_config(doc, title=title, theme=theme, description=description))
    click.echo(click.style("Site configuration updated", fg="green"))


@cli.command()
def stats():
    """Show page, word, category and tag statistics."""
    doc = _load(ContentStore(Path.cwd()))
    summary = site_stats(doc)
    click.echo(click.style("Site Statistics", fg="cyan", bold=True))
    click.echo(f"Total Pages: {summary.total_pages}")
    click.echo(f"Categories: {len(summary.categories)}")
    click.echo(f"Tags: {len(summary.tags)}")
    click.echo(f"Total Words: {summary.total_words}")
    click.echo(f"Avg Reading Time: {summary.avg_reading_time} min")
    if summary.categories:
        click.echo(click.style("\nCategories:", fg="magenta"))
        for name, count in summary.categories.items():
            click.echo(f"  - {name}: {count} pages")
    if summary.tags:
        click.echo(click.style("\nTop Tags:", fg="yellow"))
        for name, count in summary.tags[:10]:
            click.echo(f"  - {name}: {count} pages")


@cli.command(name="export-markdown")
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("content"),
    show_default=True,
    help="Directory to write markdown files to",
)
def export_markdown_cmd(content_dir: Path):
    """Write every page as a markdown file with frontmatter."""
    from .markdown import export_markdown

    store = ContentStore(Path.cwd())
    doc = _load_valid(store)
    try:
        written = export_markdown(doc, content_dir)
    except ZyrosError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Exported {len(written) - 1} pages to {content_dir}")


@cli.command(name="import-markdown")
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("content"),
    show_default=True,
    help="Directory holding pages/ and posts/",
)
def import_markdown_cmd(content_dir: Path):
    """Read markdown pages back into public/site.json.

    A page whose slug already exists replaces it in place; new pages are
    appended. Nothing is saved if the result would not validate.
    """
    from .markdown import load_markdown_pages, merge_pages

    store = ContentStore(Path.cwd())
    doc = _load_valid(store)
    try:
        pages = load_markdown_pages(content_dir)
    except ZyrosError as exc:
        raise click.ClickException(str(exc)) from exc
    if not pages:
        click.echo(click.style(f"No markdown pages found in {content_dir}", fg="yellow"))
        return

    updated, replaced, added = merge_pages(doc, pages)
    result = validate(updated)
    if result.errors:
        click.echo(click.style("Import failed:", fg="red", bold=True), err=True)
        _echo_result(result, err=True)
        raise SystemExit(1)
    _save(store, updated)
    click.echo(f"Imported {len(pages)} pages ({len(added)} added, {len(replaced)} replaced)")


def _load(store: ContentStore) -> SiteDocument:
    try:
        return store.load()
    except ZyrosError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_valid(store: ContentStore) -> SiteDocument:
    """Load the document and refuse to continue if it has validation errors."""
    doc = _load(store)
    try:
        raise_for_errors(validate(doc))
    except ValidationError as exc:
        details = "\n".join(f"  - {error}" for error in exc.errors)
        raise click.ClickException(
            f"Fix these errors before editing (run 'zyros validate'):\n{details}"
        ) from exc
    return doc


def _save(store: ContentStore, doc: SiteDocument) -> None:
    try:
        store.save(doc)
    except ZyrosError as exc:
        raise click.ClickException(str(exc)) from exc


def _split_tags(value: str | None) -> list[str]:
    return [t.strip() for t in (value or "").split(",") if t.strip()]


def _echo_result(result: ValidationResult, err: bool = False) -> None:
    if result.ok and not result.warnings:
        click.echo(click.style("All validations passed!", fg="green"), err=err)
        return
    if result.errors:
        click.echo(click.style(f"\n{len(result.errors)} Error(s):", fg="red", bold=True), err=err)
        for error in result.errors:
            click.echo(click.style(f"  - {error}", fg="red"), err=err)
    if result.warnings:
        click.echo(click.style(f"\n{len(result.warnings)} Warning(s):", fg="yellow", bold=True), err=err)
        for warning in result.warnings:
            click.echo(click.style(f"  - {warning}", fg="yellow"), err=err)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
