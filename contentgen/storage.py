"""Markdown persistence: one file per saved article under the output directory."""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from pathlib import Path

from contentgen.errors import EmptyContent, PublishFailure, SaveFailure

logger = logging.getLogger(__name__)

NAME_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
NAME_LENGTH = 10


@dataclass(frozen=True)
class SavedFile:
    filename: str
    path: str


def random_name(length: int = NAME_LENGTH) -> str:
    return "".join(secrets.choice(NAME_ALPHABET) for _ in range(length))


class MarkdownStore:
    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def save(self, content: str) -> SavedFile:
        if not (content or "").strip():
            raise EmptyContent()
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"{random_name()}.md"
            while path.exists():
                path = self.output_dir / f"{random_name()}.md"
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise SaveFailure(f"保存 Markdown 文件失败: {e}") from e
        logger.info("Saved markdown %s (%d chars)", path.name, len(content))
        return SavedFile(filename=path.name, path=str(path.resolve()))

    def resolve(self, filename: str) -> Path:
        """Map a saved file name back to its path; names must stay inside the output dir."""
        root = self.output_dir.resolve()
        path = (root / filename).resolve()
        if not filename or path.parent != root:
            raise PublishFailure(f"Invalid filename: {filename!r}")
        if not path.is_file():
            raise PublishFailure(f"File not found: {filename}", status_code=404)
        return path
