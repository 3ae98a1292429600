"""Lightweight import/export extraction for curly-brace and Python sources.

Declarations are recovered by lexical scanning rather than a full grammar:

- Comments (and Python docstrings) are blanked out first, keeping every
  newline and character offset so line numbers stay exact.
- String contents are masked in a second copy of the text so statement
  patterns never match inside literals; specifiers are then read back from
  the unmasked copy at the same offsets.

Two syntax families are supported, selected once per file by extension
(or shebang for extension-less scripts).
"""

from __future__ import annotations

import bisect
import keyword
import logging
import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .config import CURLY_BRACE_EXTENSIONS, INDENTATION_EXTENSIONS
from .models import ExportInfo, FileAnalysis, ImportInfo

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

FAILED_TO_READ = "Failed to read file"
UNSUPPORTED_FILE_TYPE = "Unsupported file type"


class SyntaxFamily(Enum):
    CURLY_BRACE = "curly_brace"
    INDENTATION = "indentation"


# ---------------------------------------------------------------------------
# Node.js builtins
# ---------------------------------------------------------------------------

NODE_BUILTINS = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring", "readline",
    "repl", "stream", "string_decoder", "sys", "timers", "tls", "trace_events",
    "tty", "url", "util", "v8", "vm", "wasi", "worker_threads", "zlib",
})


def is_builtin_module(source: str, family: SyntaxFamily = SyntaxFamily.CURLY_BRACE) -> bool:
    """Return True for Node core modules, with or without the ``node:`` prefix.

    Python imports are never classified as builtin.
    """
    if family is not SyntaxFamily.CURLY_BRACE:
        return False
    if source.startswith("node:"):
        return True
    return source.split("/")[0] in NODE_BUILTINS


def is_relative_import(source: str, family: SyntaxFamily = SyntaxFamily.CURLY_BRACE) -> bool:
    if family is SyntaxFamily.INDENTATION:
        return source.startswith(".")
    return source.startswith(".") or source.startswith("/")


def classify_specifier(source: str, family: SyntaxFamily) -> Tuple[bool, bool, bool]:
    """Return ``(is_relative, is_package, is_builtin)``; exactly one is True.

    Precedence is builtin, then relative, then package.
    """
    if is_builtin_module(source, family):
        return False, False, True
    if is_relative_import(source, family):
        return True, False, False
    return False, True, False


def package_name(source: str, family: SyntaxFamily) -> str:
    if family is SyntaxFamily.INDENTATION:
        return source.split(".")[0]
    if source.startswith("@"):
        return "/".join(source.split("/")[:2])
    return source.split("/")[0]


# ---------------------------------------------------------------------------
# Syntax family detection
# ---------------------------------------------------------------------------

_SHEBANG_RE = re.compile(r"^#!.*\b(python[\d.]*|node|deno|bun)\b")


def detect_syntax_family(file_path: PathLike, content: Optional[str] = None) -> Optional[SyntaxFamily]:
    """Pick the syntax family by extension, or by shebang when there is none."""
    ext = os.path.splitext(str(file_path))[1].lower()
    if ext in CURLY_BRACE_EXTENSIONS:
        return SyntaxFamily.CURLY_BRACE
    if ext in INDENTATION_EXTENSIONS:
        return SyntaxFamily.INDENTATION
    if ext or not content:
        return None
    match = _SHEBANG_RE.match(content)
    if match is None:
        return None
    if match.group(1).startswith("python"):
        return SyntaxFamily.INDENTATION
    return SyntaxFamily.CURLY_BRACE


# ---------------------------------------------------------------------------
# Lexical scanning
# ---------------------------------------------------------------------------

_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%~^")
_REGEX_KEYWORDS = frozenset({
    "return", "typeof", "case", "do", "else", "in", "of", "void",
    "yield", "await", "delete", "throw", "new",
})


def _regex_allowed(code: Sequence[str], i: int) -> bool:
    """True when a ``/`` at *i* starts a regex literal rather than a division."""
    j = i - 1
    while j >= 0 and code[j].isspace():
        j -= 1
    if j < 0 or code[j] in _REGEX_PRECEDERS:
        return True
    k = j
    while k >= 0 and (code[k].isalnum() or code[k] in "_$"):
        k -= 1
    return "".join(code[k + 1:j + 1]) in _REGEX_KEYWORDS


def _regex_end(content: str, i: int) -> Optional[int]:
    """Offset just past the closing ``/`` of the literal at *i*, or None."""
    in_class = False
    k = i + 1
    while k < len(content):
        c = content[k]
        if c == "\\":
            k += 2
            continue
        if c == "\n":
            return None
        if c == "[":
            in_class = True
        elif c == "]":
            in_class = False
        elif c == "/" and not in_class:
            return k + 1
        k += 1
    return None


def scan_source(content: str, family: SyntaxFamily) -> Tuple[str, str]:
    """Blank comments out of *content*.

    Returns ``(code, masked)``: *code* has comments replaced by spaces;
    *masked* additionally has string-literal contents replaced by spaces.
    Both keep the exact length and newline positions of *content*. For the
    indentation family, triple-quoted string bodies are blanked in both.
    """
    code = list(content)
    masked = list(content)
    n = len(content)
    i = 0
    in_comment = False
    quote: Optional[str] = None
    curly = family is SyntaxFamily.CURLY_BRACE

    def blank(start: int, end: int, also_code: bool) -> None:
        for k in range(start, min(end, n)):
            if content[k] != "\n":
                masked[k] = " "
                if also_code:
                    code[k] = " "

    while i < n:
        ch = content[i]

        if in_comment:
            if content.startswith("*/", i):
                blank(i, i + 2, True)
                in_comment = False
                i += 2
            else:
                blank(i, i + 1, True)
                i += 1
            continue

        if quote is not None:
            triple = len(quote) == 3
            if ch == "\\":
                blank(i, i + 2, triple)
                i += 2
                continue
            if content.startswith(quote, i):
                i += len(quote)
                quote = None
                continue
            if ch == "\n" and quote not in ("`", '"""', "'''"):
                # Unterminated literal; stop at end of line.
                quote = None
                i += 1
                continue
            blank(i, i + 1, triple)
            i += 1
            continue

        if curly:
            if content.startswith("//", i):
                end = content.find("\n", i)
                end = n if end == -1 else end
                blank(i, end, True)
                i = end
                continue
            if content.startswith("/*", i):
                blank(i, i + 2, True)
                in_comment = True
                i += 2
                continue
            if ch == "/" and _regex_allowed(code, i):
                end = _regex_end(content, i)
                if end is not None:
                    blank(i + 1, end - 1, False)
                    i = end
                    continue
            if ch in "'\"`":
                quote = ch
                i += 1
                continue
        else:
            if ch == "#":
                end = content.find("\n", i)
                end = n if end == -1 else end
                blank(i, end, True)
                i = end
                continue
            if content.startswith('"""', i) or content.startswith("'''", i):
                quote = content[i:i + 3]
                i += 3
                continue
            if ch in "'\"":
                quote = ch
                i += 1
                continue
        i += 1

    return "".join(code), "".join(masked)


class _LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, content: str) -> None:
        self._newlines = [i for i, ch in enumerate(content) if ch == "\n"]

    def line_of(self, offset: int) -> int:
        return bisect.bisect_left(self._newlines, offset) + 1


# ---------------------------------------------------------------------------
# Curly-brace family
# ---------------------------------------------------------------------------

_IDENT = r"[A-Za-z_$][\w$]*"
_STR = r"(?P<q>['\"])(?P<src>[^'\"\n]*)(?P=q)"
_START = r"(?<![\w$.])"

_IMPORT_FROM_RE = re.compile(
    _START + r"import\s+(?P<type>type\s+)?(?P<clause>[\w$*{][^;'\"`]*?)\s*\bfrom\s*" + _STR
)
_SIDE_EFFECT_RE = re.compile(_START + r"import\s*" + _STR)
_DYNAMIC_IMPORT_RE = re.compile(
    _START + r"(?:await\s+)?import\s*\(\s*" + _STR + r"\s*\)"
)
_REQUIRE_DECL_RE = re.compile(
    _START + r"(?:const|let|var|import)\s+(?:(?P<default>" + _IDENT + r")|\{(?P<names>[^}]*)\})"
    r"\s*=\s*require\s*\(\s*" + _STR + r"\s*\)"
)
_REQUIRE_RE = re.compile(_START + r"require\s*\(\s*" + _STR + r"\s*\)")

_EXPORT_DEFAULT_RE = re.compile(_START + r"export\s+default\b\s*")
_DEFAULT_FUNCTION_RE = re.compile(r"(?:async\s+)?function\b\s*\*?\s*(?P<name>" + _IDENT + r")?")
_DEFAULT_CLASS_RE = re.compile(r"(?:abstract\s+)?class\b\s*(?P<name>" + _IDENT + r")?")
_DEFAULT_INTERFACE_RE = re.compile(r"interface\s+(?P<name>" + _IDENT + r")")
_DEFAULT_IDENT_RE = re.compile(r"(?P<name>" + _IDENT + r")\s*(?:;|$)", re.MULTILINE)

_EXPORT_NAMED_RE = re.compile(
    _START + r"export\s+(?P<type>type\s+)?\{(?P<names>[^}]*)\}(?:\s*from\s*" + _STR + r")?"
)
_EXPORT_DECL_RE = re.compile(
    _START + r"export\s+(?:declare\s+)?"
    r"(?P<kw>(?:async\s+)?function\b\s*\*?|(?:abstract\s+)?class\b|const\s+enum\b|enum\b"
    r"|interface\b|type\b|const\b|let\b|var\b)"
    r"\s*(?P<target>" + _IDENT + r"|\{[^}]*\}|\[[^\]]*\])"
)
_EXPORT_STAR_RE = re.compile(
    _START + r"export\s+(?:type\s+)?\*\s*(?:as\s+(?P<name>" + _IDENT + r")\s+)?from\s*" + _STR
)
_MODULE_EXPORTS_RE = re.compile(
    _START + r"module\.exports\s*=(?!=)\s*(?P<name>" + _IDENT + r"(?![\w$]|\s*\())?"
)
_EXPORTS_PROPERTY_RE = re.compile(
    r"(?<![\w$])(?:module\.)?exports\.(?P<name>" + _IDENT + r")\s*=(?!=)"
)

_KEYWORD_KINDS = {
    "interface": "interface",
    "type": "type",
    "const": "variable",
    "let": "variable",
    "var": "variable",
}
_CLASS_HEADER_WORDS = {"extends", "implements"}


def _parse_specifiers(text: str) -> List[Tuple[str, bool]]:
    """Parse ``a, b as c, type D`` into ``[(name, inline_type), ...]``.

    Aliased entries yield the name after ``as``.
    """
    result: List[Tuple[str, bool]] = []
    for part in text.split(","):
        item = " ".join(part.split())
        if not item:
            continue
        inline_type = False
        if item.startswith("type "):
            inline_type = True
            item = item[5:].strip()
        if " as " in item:
            item = item.split(" as ")[-1].strip()
        if item and re.fullmatch(_IDENT, item):
            result.append((item, inline_type))
    return result


def _parse_destructured(text: str) -> List[str]:
    """Parse ``a, b: c, ...rest`` from an object or array pattern."""
    names = []
    for part in text.split(","):
        item = part.split("=")[0].strip().lstrip(".")
        if ":" in item:
            item = item.split(":")[-1].strip()
        if item and re.fullmatch(_IDENT, item):
            names.append(item)
    return names


class _Collector:
    """Accumulates declarations keyed by source offset."""

    def __init__(self, content: str, code: str, family: SyntaxFamily) -> None:
        self.code = code
        self.family = family
        self.lines = _LineIndex(content)
        self.imports: List[Tuple[int, ImportInfo]] = []
        self.exports: List[Tuple[int, ExportInfo]] = []

    def source_at(self, match: "re.Match[str]") -> str:
        return self.code[match.start("src"):match.end("src")]

    def add_import(
        self,
        pos: int,
        source: str,
        names: Sequence[str] = (),
        *,
        has_default: bool = False,
        has_namespace: bool = False,
        is_type_only: bool = False,
        is_dynamic: bool = False,
    ) -> None:
        is_relative, is_package, is_builtin = classify_specifier(source, self.family)
        self.imports.append((pos, ImportInfo(
            source=source,
            imported_names=list(names),
            is_relative=is_relative,
            is_package=is_package,
            is_builtin=is_builtin,
            has_default=has_default,
            has_namespace=has_namespace,
            is_type_only=is_type_only,
            is_dynamic=is_dynamic,
            line=self.lines.line_of(pos),
        )))

    def add_export(
        self,
        pos: int,
        name: str,
        kind: str = "unknown",
        *,
        is_default: bool = False,
        is_type: bool = False,
        re_export_source: Optional[str] = None,
    ) -> None:
        self.exports.append((pos, ExportInfo(
            name=name,
            is_default=is_default,
            is_type=is_type,
            is_re_export=re_export_source is not None,
            re_export_source=re_export_source,
            kind=kind,
            line=self.lines.line_of(pos),
        )))

    def result(self) -> Tuple[List[ImportInfo], List[ExportInfo]]:
        imports = [imp for _, imp in sorted(self.imports, key=lambda item: item[0])]
        exports = [exp for _, exp in sorted(self.exports, key=lambda item: item[0])]
        return imports, exports


def _extract_curly_imports(masked: str, out: _Collector) -> None:
    for m in _IMPORT_FROM_RE.finditer(masked):
        source = out.source_at(m)
        clause = " ".join(m.group("clause").split())
        names: List[str] = []
        has_default = has_namespace = False
        inline_flags: List[bool] = []

        default_part, _, rest = clause.partition(",") if not clause.startswith("{") else ("", "", clause)
        default_part = default_part.strip()
        rest = rest.strip()
        if default_part.startswith("*"):
            rest, default_part = default_part, ""
        if default_part:
            names.append(default_part)
            has_default = True
        if rest.startswith("*"):
            ns = rest.split(" as ")[-1].strip()
            if ns:
                names.append(ns)
            has_namespace = True
        elif rest.startswith("{"):
            for name, inline_type in _parse_specifiers(rest.strip("{} ")):
                names.append(name)
                inline_flags.append(inline_type)

        type_only = bool(m.group("type")) or (
            not has_default and not has_namespace and bool(inline_flags) and all(inline_flags)
        )
        out.add_import(
            m.start(), source, names,
            has_default=has_default, has_namespace=has_namespace, is_type_only=type_only,
        )

    for m in _SIDE_EFFECT_RE.finditer(masked):
        out.add_import(m.start(), out.source_at(m))

    for m in _DYNAMIC_IMPORT_RE.finditer(masked):
        out.add_import(m.start(), out.source_at(m), is_dynamic=True)

    declared: List[Tuple[int, int]] = []
    for m in _REQUIRE_DECL_RE.finditer(masked):
        declared.append((m.start(), m.end()))
        if m.group("default"):
            out.add_import(m.start(), out.source_at(m), [m.group("default")], has_default=True)
        else:
            out.add_import(m.start(), out.source_at(m), _parse_destructured(m.group("names")))

    for m in _REQUIRE_RE.finditer(masked):
        if any(start <= m.start() < end for start, end in declared):
            continue
        out.add_import(m.start(), out.source_at(m))


def _extract_curly_exports(masked: str, out: _Collector) -> None:
    for m in _EXPORT_DEFAULT_RE.finditer(masked):
        tail = m.end()
        fn = _DEFAULT_FUNCTION_RE.match(masked, tail)
        cls = _DEFAULT_CLASS_RE.match(masked, tail)
        iface = _DEFAULT_INTERFACE_RE.match(masked, tail)
        if fn:
            out.add_export(m.start(), fn.group("name") or "default", "function", is_default=True)
        elif cls:
            name = cls.group("name")
            if not name or name in _CLASS_HEADER_WORDS:
                name = "default"
            out.add_export(m.start(), name, "class", is_default=True)
        elif iface:
            out.add_export(m.start(), iface.group("name"), "interface", is_default=True, is_type=True)
        else:
            ident = _DEFAULT_IDENT_RE.match(masked, tail)
            out.add_export(m.start(), ident.group("name") if ident else "default", is_default=True)

    for m in _EXPORT_NAMED_RE.finditer(masked):
        source = out.source_at(m) if m.group("src") is not None else None
        for name, inline_type in _parse_specifiers(m.group("names")):
            out.add_export(
                m.start(), name,
                is_default=name == "default",
                is_type=bool(m.group("type")) or inline_type,
                re_export_source=source,
            )

    for m in _EXPORT_DECL_RE.finditer(masked):
        kw = m.group("kw")
        if "enum" in kw:
            kind = "enum"
        elif "function" in kw:
            kind = "function"
        elif "class" in kw:
            kind = "class"
        else:
            kind = _KEYWORD_KINDS.get(kw.strip(), "unknown")
        target = m.group("target")
        is_type = kind in ("type", "interface")
        if target[0] in "{[":
            if kind != "variable":
                continue
            for name in _parse_destructured(target[1:-1]):
                out.add_export(m.start(), name, kind)
        else:
            out.add_export(m.start(), target, kind, is_type=is_type)

    for m in _EXPORT_STAR_RE.finditer(masked):
        out.add_export(m.start(), m.group("name") or "*", re_export_source=out.source_at(m))

    for m in _MODULE_EXPORTS_RE.finditer(masked):
        out.add_export(m.start(), m.group("name") or "default", is_default=True)

    for m in _EXPORTS_PROPERTY_RE.finditer(masked):
        out.add_export(m.start(), m.group("name"))


# ---------------------------------------------------------------------------
# Indentation family (Python)
# ---------------------------------------------------------------------------

_PY_IMPORT_RE = re.compile(r"import\s+(?P<modules>.+)$", re.S)
_PY_FROM_RE = re.compile(r"from\s+(?P<source>\.+[\w.]*|[\w.]+)\s+import\s+(?P<names>.+)$", re.S)
_PY_TYPE_CHECKING_RE = re.compile(r"if\s+(?:typing\.)?TYPE_CHECKING\s*:\s*$")
_PY_DEF_RE = re.compile(r"(?:async\s+)?def\s+(?P<name>\w+)")
_PY_CLASS_RE = re.compile(r"class\s+(?P<name>\w+)")
_PY_TYPE_ALIAS_RE = re.compile(r"type\s+(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*=")
_PY_ASSIGN_RE = re.compile(r"(?P<targets>\w+(?:\s*,\s*\w+)*)\s*(?::[^=]*)?=(?!=)")
_PY_ALL_RE = re.compile(r"__all__\s*(?::[^=]*)?\+?=\s*[\[(](?P<body>.*)[\])]", re.S)
_PY_STRING_NAME_RE = re.compile(r"['\"](\w+)['\"]")


def _join_lines(lines: Iterable[str]) -> str:
    parts = []
    for line in lines:
        line = line.rstrip()
        if line.endswith("\\"):
            line = line[:-1]
        if line.strip():
            parts.append(line.strip())
    return " ".join(parts)


def _logical_lines(masked: str) -> Iterator[Tuple[int, int, int]]:
    """Yield ``(start, end, indent)`` for each logical line.

    Bracketed and backslash continuations are joined into one line.
    """
    offset = 0
    start: Optional[int] = None
    indent = 0
    depth = 0
    for raw in masked.split("\n"):
        line_end = offset + len(raw)
        stripped = raw.rstrip()
        if start is None:
            if not stripped.strip():
                offset = line_end + 1
                continue
            start = offset
            indent = len(raw) - len(raw.lstrip())
        depth = max(0, depth + sum(stripped.count(c) for c in "([{") - sum(stripped.count(c) for c in ")]}"))
        offset = line_end + 1
        if depth > 0 or stripped.endswith("\\"):
            continue
        yield start, line_end, indent
        start = None
    if start is not None:
        yield start, len(masked), indent


def _statements(masked: str) -> Iterator[Tuple[int, int, int, str]]:
    """Yield ``(pos, end, indent, text)`` for each simple statement.

    Logical lines are split on ``;`` outside brackets; *pos* is the offset
    of the statement's first character.
    """
    for start, end, indent in _logical_lines(masked):
        cuts = []
        depth = 0
        for i in range(start, end):
            ch = masked[i]
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth = max(0, depth - 1)
            elif ch == ";" and depth == 0:
                cuts.append(i)

        piece_start = start
        for piece_end in cuts + [end]:
            span = masked[piece_start:piece_end]
            text = _join_lines(span.split("\n"))
            if text:
                pos = piece_start + len(span) - len(span.lstrip())
                yield pos, piece_end, indent, text
            piece_start = piece_end + 1


def _split_alias(item: str) -> Tuple[str, Optional[str]]:
    name, _, alias = item.partition(" as ")
    return name.strip(), (alias.strip() or None)


def _extract_python(code: str, masked: str, out: _Collector) -> None:
    definitions: Dict[str, Tuple[int, str, bool]] = {}
    listed: List[str] = []
    all_pos: Optional[int] = None
    type_checking_indent: Optional[int] = None

    for pos, end, indent, text in _statements(masked):
        if type_checking_indent is not None and indent <= type_checking_indent:
            type_checking_indent = None
        if _PY_TYPE_CHECKING_RE.match(text):
            type_checking_indent = indent
            continue
        type_only = type_checking_indent is not None

        m = _PY_FROM_RE.match(text)
        if m:
            source = m.group("source")
            names_part = m.group("names").strip().strip("()").strip()
            if names_part == "*":
                out.add_import(pos, source, ["*"], has_namespace=True, is_type_only=type_only)
            else:
                names = []
                for item in names_part.split(","):
                    name, alias = _split_alias(item)
                    if name:
                        names.append(alias or name)
                out.add_import(pos, source, names, is_type_only=type_only)
            continue

        m = _PY_IMPORT_RE.match(text)
        if m:
            for item in m.group("modules").split(","):
                module, alias = _split_alias(item)
                if not module:
                    continue
                out.add_import(
                    pos, module, [alias or module.split(".")[-1]],
                    has_namespace=True, is_type_only=type_only,
                )
            continue

        if indent > 0:
            continue

        m = _PY_ALL_RE.match(text)
        if m:
            body = code[pos:end]
            body_match = _PY_ALL_RE.search(body)
            if body_match:
                for name in _PY_STRING_NAME_RE.findall(body_match.group("body")):
                    if name not in listed:
                        listed.append(name)
            if all_pos is None:
                all_pos = pos
            continue

        for pattern, kind in ((_PY_CLASS_RE, "class"), (_PY_DEF_RE, "function"), (_PY_TYPE_ALIAS_RE, "type")):
            m = pattern.match(text)
            if m:
                definitions.setdefault(m.group("name"), (pos, kind, kind == "type"))
                break
        else:
            m = _PY_ASSIGN_RE.match(text)
            if m:
                for name in m.group("targets").split(","):
                    name = name.strip()
                    if not keyword.iskeyword(name):
                        definitions.setdefault(name, (pos, "variable", False))

    for name, (pos, kind, is_type) in definitions.items():
        if name.startswith("_") and name not in listed:
            continue
        out.add_export(pos, name, kind, is_type=is_type)
    if all_pos is not None:
        for name in listed:
            if name not in definitions:
                out.add_export(all_pos, name)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def extract_declarations(content: str, family: SyntaxFamily) -> Tuple[List[ImportInfo], List[ExportInfo]]:
    """Extract ordered imports and exports from *content*."""
    code, masked = scan_source(content, family)
    out = _Collector(content, code, family)
    if family is SyntaxFamily.CURLY_BRACE:
        _extract_curly_imports(masked, out)
        _extract_curly_exports(masked, out)
    elif family is SyntaxFamily.INDENTATION:
        _extract_python(code, masked, out)
    return out.result()


def analyze_source(file_path: PathLike, content: str, family: Optional[SyntaxFamily] = None) -> FileAnalysis:
    """Build a :class:`FileAnalysis` from already-loaded text."""
    analysis = FileAnalysis(file_path=str(file_path))
    family = family or detect_syntax_family(file_path, content)
    if family is None:
        logger.debug("Unsupported file type for %s", file_path)
        analysis.parse_errors.append(UNSUPPORTED_FILE_TYPE)
        return analysis

    analysis.imports, analysis.exports = extract_declarations(content, family)
    for imp in analysis.imports:
        if imp.is_relative:
            analysis.local_imports.append(imp.source)
        elif imp.is_package:
            pkg = package_name(imp.source, family)
            if pkg not in analysis.external_imports:
                analysis.external_imports.append(pkg)
    return analysis


class DeclarationExtractor:
    """Parses files into :class:`FileAnalysis` records, caching by path.

    The cache lives on the instance; :meth:`clear_cache` drops it. Results
    re-extracted after a clear are equal but not identical objects.
    """

    def __init__(self) -> None:
        self._cache: Dict[str, FileAnalysis] = {}
        self._lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def cached(self, file_path: PathLike) -> Optional[FileAnalysis]:
        with self._lock:
            return self._cache.get(str(file_path))

    def parse_file(self, file_path: PathLike) -> FileAnalysis:
        key = str(file_path)
        cached = self.cached(key)
        if cached is not None:
            return cached

        analysis = self._parse_uncached(key)
        with self._lock:
            return self._cache.setdefault(key, analysis)

    def parse_files(self, file_paths: Iterable[PathLike], workers: int = 1) -> Dict[str, FileAnalysis]:
        """Parse many files; the mapping preserves input order."""
        paths = [str(p) for p in file_paths]
        if workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                analyses = list(pool.map(self.parse_file, paths))
        else:
            analyses = [self.parse_file(p) for p in paths]
        return dict(zip(paths, analyses))

    @staticmethod
    def _parse_uncached(file_path: str) -> FileAnalysis:
        ext = os.path.splitext(file_path)[1].lower()
        if ext and ext not in CURLY_BRACE_EXTENSIONS and ext not in INDENTATION_EXTENSIONS:
            logger.debug("Unsupported file type '%s' for %s", ext, file_path)
            return FileAnalysis(file_path=file_path, parse_errors=[UNSUPPORTED_FILE_TYPE])
        try:
            content = Path(file_path).read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.debug("Failed to read %s: %s", file_path, exc)
            return FileAnalysis(file_path=file_path, parse_errors=[FAILED_TO_READ])
        return analyze_source(file_path, content)


def parse_file(file_path: PathLike) -> FileAnalysis:
    """Parse a single file with a fresh extractor."""
    return DeclarationExtractor().parse_file(file_path)


def parse_files(file_paths: Iterable[PathLike], workers: int = 1) -> Dict[str, FileAnalysis]:
    """Parse several files with a fresh extractor."""
    return DeclarationExtractor().parse_files(file_paths, workers=workers)
