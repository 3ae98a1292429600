from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .report import build_report

SEPARATOR = ","


def load_rows(path):
    if not os.path.exists(path):
        return []
    with open(path, encoding="utf-8") as f:
        return [line.split(SEPARATOR) for line in f]


def _strip(value):
    return value.strip()
