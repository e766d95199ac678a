"""Pull request body rendering."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pystache import Renderer
from pystache.parser import ParsingError

from draftpr.errors import TemplateRenderFailed
from draftpr.models import Issue

DEFAULT_TEMPLATE = "{{netlify.issueDescription}}\n\n{{netlify.deployPreview}}"

# Checked in order when no template_path is configured.
TEMPLATE_CANDIDATES = (
    Path(".github") / "pull_request_template.md",
    Path(".github") / "PULL_REQUEST_TEMPLATE.md",
    Path("docs") / "pull_request_template.md",
    Path("PULL_REQUEST_TEMPLATE.md"),
)

NAMESPACE = "netlify"


def find_template(template_path: str | None = None) -> Path | None:
    candidates = (Path(template_path),) if template_path else TEMPLATE_CANDIDATES
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_template(template_path: str | None = None) -> tuple[str, Path | None]:
    """Return (template, path). path is None when falling back to DEFAULT_TEMPLATE."""
    path = find_template(template_path)
    if path is None:
        return DEFAULT_TEMPLATE, None
    try:
        return path.read_text(encoding="utf-8"), path
    except UnicodeDecodeError as exc:
        raise TemplateRenderFailed(f"Pull request template {path} is not valid UTF-8: {exc.reason}") from exc


def _renderer(escape_output: bool) -> Renderer:
    # partials={} keeps {{> name}} from searching the filesystem; unknown partials render empty
    return Renderer(
        escape=None if escape_output else (lambda s: s),
        missing_tags="ignore",
        partials={},
    )


def render_body(template: str, context: Mapping[str, Any], escape_output: bool = False) -> str:
    """Render a mustache template against context. Unknown placeholders render as empty strings.

    Issue descriptions are markdown/HTML, so values are inserted unescaped unless
    escape_output is set. Triple-brace tags are never escaped.
    """
    try:
        return _renderer(escape_output).render(template, dict(context))
    except ParsingError as exc:
        raise TemplateRenderFailed(f"Could not render pull request template: {exc}") from exc


def issue_description_block(description: str | None) -> str:
    return (
        "<details>\n"
        "<summary>Linked issue description (expand for more context)</summary>\n\n"
        f"{description or ''}\n\n"
        "</details>"
    )


def deploy_preview_url(sequence: int, site: str, entry_path: str) -> str:
    if not entry_path.startswith("/"):
        entry_path = f"/{entry_path}"
    return f"https://deploy-preview-{sequence}--{site}.netlify.app{entry_path}"


def build_context(
    issue: Issue,
    sequence: int,
    site: str,
    entry_path: str,
    plugin_values: Mapping[str, Any] | None = None,
) -> dict[str, dict[str, Any]]:
    """Build the template context. Plugin values override the base fields."""
    fields: dict[str, Any] = {
        "issueDescription": issue_description_block(issue.description),
        "issueNumber": str(issue.number),
        "issueURL": issue.url or "",
        "deployPreview": deploy_preview_url(sequence, site, entry_path),
        "setEntryPath": f"@netlify {entry_path}",
    }
    fields.update(plugin_values or {})
    return {NAMESPACE: fields}
