#!/usr/bin/env python3
"""Validate .po catalogs using polib.

1. every catalog parses;
2. every key used in code (translation calls and ``message_key`` arguments) is present
   and translated in every catalog.

Exit non-zero on any problem.
"""
from __future__ import annotations

import re
import sys
from pathlib import Path

import polib


ROOT = Path(__file__).resolve().parents[1]
EXCLUDE_DIRS = {".git", "venv", ".venv", "alembic", "locales", "tests"}

_KEY_RE = re.compile(r"\bt\(\s*['\"]([a-zA-Z0-9_.]+)['\"]")
_MSGKEY_RE = re.compile(r"message_key\s*=\s*['\"]([a-zA-Z0-9_.]+)['\"]")


def collect_used_keys(root: Path = ROOT) -> set[str]:
    used: set[str] = set()
    for p in root.rglob("*.py"):
        if any(part in EXCLUDE_DIRS for part in p.relative_to(root).parts):
            continue
        text = p.read_text(encoding="utf-8", errors="ignore")
        used.update(m.group(1) for m in _KEY_RE.finditer(text))
        used.update(m.group(1) for m in _MSGKEY_RE.finditer(text))
    return used


def check_catalogs(root: Path = ROOT) -> list[str]:
    """Return a list of human readable problems (empty when all good)."""
    po_files = sorted((root / "locales").glob("*/LC_MESSAGES/*.po"))
    problems: list[str] = []
    catalogs = {}
    for f in po_files:
        try:
            catalogs[f] = polib.pofile(str(f))
        except (OSError, ValueError) as exc:
            problems.append(f"{f}: {exc}")
    if problems:
        return problems

    used_keys = collect_used_keys(root)
    for f, po in catalogs.items():
        keys_in_po = {e.msgid for e in po}
        missing = sorted(used_keys - keys_in_po)
        untranslated = sorted(e.msgid for e in po if not (e.msgstr or "").strip())
        if missing:
            problems.append(f"[i18n] Missing keys in {f}: " + ", ".join(missing))
        if untranslated:
            problems.append(f"[i18n] Untranslated keys in {f}: " + ", ".join(untranslated))
    return problems


def main() -> int:
    problems = check_catalogs()
    for line in problems:
        print(line, file=sys.stderr)
    return 1 if problems else 0


if __name__ == "__main__":
    raise SystemExit(main())
