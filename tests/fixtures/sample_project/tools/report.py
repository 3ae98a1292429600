"""Small report builder used by the CLI tests."""

import json

from . import helpers
from .helpers import load_rows


def build_report(path):
    rows = load_rows(path)
    return json.dumps({"rows": len(rows), "sep": helpers.SEPARATOR})
