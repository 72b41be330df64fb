"""Markdown rendering of release documents and the local release notes artifact."""

from datetime import datetime
from pathlib import Path

import structlog

from github_release_notes.configuration.models import ArtifactMode
from github_release_notes.utils.constants import SHORT_SHA_LENGTH

from .models import ReleaseDocument, RewrittenCommit

logger = structlog.get_logger(__name__)


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class MarkdownWriter:
    """Renders release documents as markdown suitable for a GitHub release body."""

    def render_header(self, document: ReleaseDocument) -> str:
        """Header line carrying the window bounds."""
        return f"### 📌 Release Notes ({_format_timestamp(document.window_start)} to {_format_timestamp(document.window_end)})"

    def render_entry(self, entry: RewrittenCommit) -> str:
        """One bullet per commit; placeholders state why the description is missing."""
        short_sha = entry.sha[:SHORT_SHA_LENGTH]
        text = " ".join(entry.text.split())
        if entry.is_placeholder:
            return f"- `{short_sha}` **[{entry.unavailable_reason}]** {text}"
        return f"- `{short_sha}` {text}"

    def render(self, document: ReleaseDocument) -> str:
        """Render the whole document."""
        parts = [self.render_header(document), "", "#### 🔹 Summary of Updates", document.summary_text.strip(), ""]

        if document.category_sections:
            for category, text in document.category_sections.items():
                parts.extend([f"#### {category.value}", text.strip(), ""])

        if document.entries:
            parts.append("#### 🔹 Commits")
            parts.extend(self.render_entry(entry) for entry in document.entries)
            parts.append("")

        return "\n".join(parts)

    def write_artifact(self, path: Path, content: str, mode: ArtifactMode = ArtifactMode.OVERWRITE) -> None:
        """Write rendered notes to a local file, replacing it or appending to it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if mode == ArtifactMode.APPEND and path.exists() and path.stat().st_size > 0:
            with path.open("a", encoding="utf-8") as f:
                f.write("\n" + content)
        else:
            path.write_text(content, encoding="utf-8")
        logger.info("Wrote release notes artifact", path=str(path), mode=mode.value)
