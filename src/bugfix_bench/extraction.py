"""Turn a free-text model response into a patch (relative path -> file content).

Recognized shape::

    ```typescript
    // File: src/server.ts
    ...code...
    ```

Blocks without a header get a best-effort filename from their content.
That guess can be wrong; it is not corrected here. When two blocks land
on the same path the later one wins.
"""

from __future__ import annotations

import re

FENCE_RE = re.compile(r"^[ \t]*```([\w+-]*)[^`\n]*\n(.*?)^[ \t]*```", re.DOTALL | re.MULTILINE)
HEADER_RE = re.compile(r"^\s*(?://|#)\s*file:\s*(\S+)\s*$", re.IGNORECASE)
CODE_TOKEN_RE = re.compile(r"\b(?:import|export|function|const|class|var|let|interface|type|enum)\b")
NUMBERED_PROSE_RE = re.compile(r"^\d+\.\s+\S")
BOLD_HEADING_RE = re.compile(r"^\*\*.*:\*\*$")

DEFAULT_LANGUAGES = frozenset({"typescript", "ts", "javascript", "js", "tsx", "jsx", ""})
BUG_MARKER_PREFIXES = ("// BUG:", "// This")
EXPLANATION_MARKERS = ("\n## ", "\n**", "\n---", "\nFixes applied:", "\nFixes Summary:")
MIN_CODE_LENGTH = 10


class PatchExtractor:
    """Parse fenced code blocks out of a model response."""

    def __init__(
        self,
        source_dir: str = "src",
        extension: str = ".ts",
        languages: frozenset[str] | set[str] = DEFAULT_LANGUAGES,
    ):
        self.source_prefix = source_dir.rstrip("/") + "/"
        self.extension = extension
        self.languages = frozenset(lang.lower() for lang in languages)

    def extract(self, response_text: str | None) -> dict[str, str]:
        """Return the patch found in ``response_text``; empty when there is none."""
        files: dict[str, str] = {}
        if not response_text or not response_text.strip():
            return files

        unnamed = 0
        for match in FENCE_RE.finditer(response_text):
            if match.group(1).lower() not in self.languages:
                continue
            block = match.group(2).strip()
            if not block:
                continue

            path, code = self._split_header(block)
            if path is None:
                unnamed += 1
                path = self.guess_filename(block, unnamed)

            code = clean_code(code)
            if len(code) > MIN_CODE_LENGTH and CODE_TOKEN_RE.search(code):
                files[path] = code

        return files

    def _split_header(self, block: str) -> tuple[str | None, str]:
        first_line, _, rest = block.partition("\n")
        header = HEADER_RE.match(first_line)
        if not header:
            return None, block
        return self._normalize_path(header.group(1)), rest

    def _normalize_path(self, path: str) -> str:
        path = path.strip("`'\"")
        if path.startswith("./"):
            path = path[2:]
        if path.startswith(self.source_prefix):
            path = path[len(self.source_prefix):]
        return path

    def guess_filename(self, block: str, ordinal: int) -> str:
        """Guess where a header-less block belongs, first match wins."""
        if "Bun.serve" in block or ("export default" in block and "fetch" in block):
            return f"server{self.extension}"
        if "export function" in block or "export const" in block or "interface " in block:
            return f"index{self.extension}"
        if "import { SQL }" in block or "import { sql }" in block:
            return f"types{self.extension}"
        if "describe(" in block or "test(" in block:
            return f"test{self.extension}"
        return f"code{ordinal}{self.extension}"


def clean_code(code: str) -> str:
    """Drop trailing explanation prose and annotation lines from a block."""
    cut = min((i for i in (code.find(m) for m in EXPLANATION_MARKERS) if i > 0), default=-1)
    if cut > 0:
        code = code[:cut]

    kept = []
    for line in code.split("\n"):
        stripped = line.strip()
        if stripped.startswith(BUG_MARKER_PREFIXES):
            continue
        if NUMBERED_PROSE_RE.match(stripped) or BOLD_HEADING_RE.match(stripped):
            continue
        if stripped.startswith("---"):
            continue
        kept.append(line)
    return "\n".join(kept).strip()
