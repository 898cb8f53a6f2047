"""Trim inline-comment diff hunks down to the code around the comment.

GitHub's ``diff_hunk`` for a review comment can run to the whole file.
Three tiers, in order:
  1. hunk of at most FULL_HUNK_MAX_LINES lines: verbatim, tagged ``diff``
  2. otherwise, added/context lines within CONTEXT_RADIUS of the target line,
     marker stripped, tagged with the file's language
  3. otherwise, the first FALLBACK_HEAD_LINES raw lines plus an ellipsis,
     tagged ``diff``
The thresholds are part of the report format; changing them changes output.
"""

from __future__ import annotations

from dataclasses import dataclass

FULL_HUNK_MAX_LINES = 50
CONTEXT_RADIUS = 10
FALLBACK_HEAD_LINES = 25
ELLIPSIS = "..."

LANGUAGE_BY_EXTENSION = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "go": "go",
    "py": "python",
    "java": "java",
    "sql": "sql",
    "json": "json",
    "yml": "yaml",
    "yaml": "yaml",
    "html": "html",
    "css": "css",
}


@dataclass(frozen=True)
class DiffExcerpt:
    code: str
    language: str
    truncated: bool

    def to_markdown(self) -> str:
        return f"```{self.language}\n{self.code}\n```"


def infer_language(path: str | None) -> str:
    if not path or "." not in path:
        return "text"
    ext = path.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(ext, "text")


def extract_context(diff_hunk: str, target_line: int | None = None, path: str | None = None) -> DiffExcerpt:
    lines = diff_hunk.split("\n")
    if len(lines) <= FULL_HUNK_MAX_LINES:
        return DiffExcerpt(code=diff_hunk, language="diff", truncated=False)

    context: list[str] = []
    line_number = 1
    for line in lines:
        # Only added and context lines exist in the new file; "-", "@@" and
        # "\ No newline" lines do not move the counter.
        if not line.startswith(("+", " ")):
            continue
        if target_line and abs(line_number - target_line) <= CONTEXT_RADIUS:
            context.append(line[1:])
        line_number += 1

    if context:
        return DiffExcerpt(code="\n".join(context), language=infer_language(path), truncated=True)

    head = "\n".join(lines[:FALLBACK_HEAD_LINES])
    return DiffExcerpt(code=f"{head}\n{ELLIPSIS}", language="diff", truncated=True)
