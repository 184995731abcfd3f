# Front-matter helpers for generated markdown.
# Block shape is exactly "---\nkey: value\n...\n---"; display code strips it by
# pattern, so parse/strip here must agree with that.

from __future__ import annotations

import random
import re
from typing import Dict, Optional, Sequence, Tuple

FRONT_MATTER_RE = re.compile(r"^---\n[\s\S]*?\n---")
_DASH_RUN_RE = re.compile(r"-{3,}")
_BLOCK_RE = re.compile(r"^---\n(.*?)\n---", re.DOTALL)


def build_front_matter(fields: Dict[str, str]) -> str:
    lines = [f"{k}: {_one_line(v)}" for k, v in fields.items()]
    return "---\n" + "\n".join(lines) + "\n---"


def add_front_matter(body: str, title: str, cover: Optional[str] = None) -> str:
    fields = {"title": title}
    if cover:
        fields["cover"] = cover
    return f"{build_front_matter(fields)}\n\n{body.strip()}"


def strip_front_matter(content: str) -> str:
    return FRONT_MATTER_RE.sub("", content, count=1).strip()


def parse_front_matter(content: str) -> Tuple[Dict[str, str], str]:
    """Return (fields, body). Content without a block yields ({}, stripped content)."""
    m = _BLOCK_RE.match(content)
    if not m:
        return {}, content.strip()
    fields: Dict[str, str] = {}
    for line in m.group(1).splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            fields[key.strip()] = value.strip()
    return fields, content[m.end():].strip()


def pick_cover(covers: Sequence[str], rng: Optional[random.Random] = None) -> Optional[str]:
    if not covers:
        return None
    return (rng or random).choice(list(covers))


def _one_line(value: str) -> str:
    # no "---" runs inside values; the first fence after the opener must close the block
    return _DASH_RUN_RE.sub("--", " ".join(str(value).split()))
