# projectgen/core/validator.py
"""
Static dependency-consistency checks for a generated file map.

The validator never runs npm or the project. It compares what the sources
import against what package.json declares, then layers bundler and UI-runtime
presence checks on top. Issues are appended in a fixed order:

  1. manifest presence        (fail fast, single issue)
  2. manifest parse           (fail fast, single issue)
  3. required manifest fields (one issue each)
  4-6. undeclared imports     (one issue listing every missing package)
  7. bundler plugins and entry files (one issue each)
  8. React runtime packages   (one issue each)

Import scanning is regex based and therefore best effort: string-built module
names and computed requires are invisible to it.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
REQUIRED_FIELDS = ("name", "version", "dependencies", "devDependencies")
SUGGESTED_VERSION = "latest"

SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".mts", ".cts", ".vue", ".svelte", ".astro")

# `import x from "y"`, `import {a,\n b} from "y"`, `export * from "y"`
_FROM_RE = re.compile(r"""\b(?:import|export)\b[^;'"`]*?\bfrom\s*['"]([^'"\n]+)['"]""")
# `import "y"`
_BARE_IMPORT_RE = re.compile(r"""\bimport\s*['"]([^'"\n]+)['"]""")
# `require("y")`, `import("y")`
_CALL_RE = re.compile(r"""\b(?:require|import)\s*\(\s*['"]([^'"\n]+)['"]\s*\)""")

_REACT_LITERAL_RE = re.compile(r"\bReact\b")

NODE_BUILTINS = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console", "constants",
    "crypto", "dgram", "diagnostics_channel", "dns", "domain", "events", "fs", "http",
    "http2", "https", "inspector", "module", "net", "os", "path", "perf_hooks", "process",
    "punycode", "querystring", "readline", "repl", "stream", "string_decoder", "sys",
    "timers", "tls", "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

# bundler -> (recognized plugin -> suggested version, needs entry files)
_BUNDLER_CONFIG_RE = re.compile(r"(?:^|/)(vite|webpack)\.config\.(?:js|mjs|cjs|ts|mts|cts)$")
BUNDLER_PLUGINS: Dict[str, Dict[str, str]] = {
    "vite": {
        "@vitejs/plugin-react": "^4.3.1",
        "@vitejs/plugin-react-swc": "^3.7.0",
        "@vitejs/plugin-vue": "^5.1.2",
        "@vitejs/plugin-legacy": "^5.4.2",
        "@sveltejs/vite-plugin-svelte": "^3.1.1",
    },
    "webpack": {
        "html-webpack-plugin": "^5.6.0",
        "mini-css-extract-plugin": "^2.9.0",
        "copy-webpack-plugin": "^12.0.2",
        "css-minimizer-webpack-plugin": "^7.0.0",
        "terser-webpack-plugin": "^5.3.10",
        "@pmmmwh/react-refresh-webpack-plugin": "^0.5.15",
    },
}
ENTRY_POINT_BUNDLERS = frozenset({"vite"})
HTML_ENTRY = "index.html"
SOURCE_ENTRIES = (
    "src/main.jsx", "src/main.tsx", "src/main.js", "src/main.ts",
    "src/index.jsx", "src/index.tsx", "src/index.js", "src/index.ts",
)

REACT_PACKAGES: Tuple[Tuple[str, str], ...] = (
    ("react", "^18.3.1"),
    ("react-dom", "^18.3.1"),
)


@dataclass
class ValidationReport:
    issues: List[str] = field(default_factory=list)
    missing_dependencies: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


# ----------------------------
# Reference extraction
# ----------------------------
def is_source_file(path: str) -> bool:
    return path.lower().endswith(SOURCE_EXTENSIONS)


def extract_module_references(content: str) -> List[str]:
    """Raw module specifiers in order of appearance."""
    found: List[Tuple[int, str]] = []
    for pattern in (_FROM_RE, _BARE_IMPORT_RE, _CALL_RE):
        for m in pattern.finditer(content or ""):
            found.append((m.start(1), m.group(1)))
    found.sort()
    return [ref for _, ref in found]


def normalize_reference(ref: str) -> Optional[str]:
    """
    Map a specifier to the package name that must be declared, or None when
    the specifier is not manifest-checkable (relative, absolute, alias,
    scheme-prefixed or a node builtin).
    """
    ref = (ref or "").strip().split("?", 1)[0]
    if not ref or ref.startswith((".", "/", "#", "~", "@/")):
        return None
    if ":" in ref:
        return None
    parts = ref.split("/")
    if ref.startswith("@"):
        if len(parts) < 2 or not parts[0][1:] or not parts[1]:
            return None
        name = "/".join(parts[:2])
    else:
        name = parts[0]
    if name in NODE_BUILTINS:
        return None
    return name


def package_references(content: str) -> List[str]:
    """Normalized, de-duplicated package names referenced by one file."""
    seen: Dict[str, None] = {}
    for ref in extract_module_references(content):
        name = normalize_reference(ref)
        if name:
            seen.setdefault(name, None)
    return list(seen)


# ----------------------------
# Manifest helpers
# ----------------------------
def find_manifests(files: Iterable[str]) -> List[str]:
    return [p for p in files if p == MANIFEST_NAME or p.endswith("/" + MANIFEST_NAME)]


def _section(manifest: Mapping, key: str, issues: List[str]) -> Dict[str, str]:
    if key not in manifest:
        return {}
    value = manifest[key]
    if not isinstance(value, dict):
        issues.append(f'"{key}" in package.json must be an object')
        return {}
    for name, version in value.items():
        if not isinstance(version, str):
            issues.append(f'"{key}" entry "{name}" in package.json must be a version string')
    return value


def _project_base(path: str) -> str:
    return path.rsplit("/", 1)[0] + "/" if "/" in path else ""


# ----------------------------
# Checks
# ----------------------------
def _check_bundlers(files: Mapping[str, str], dev_deps: Mapping[str, str], issues: List[str]) -> None:
    for path in files:
        m = _BUNDLER_CONFIG_RE.search(path)
        if not m:
            continue
        bundler = m.group(1)
        plugins = BUNDLER_PLUGINS.get(bundler, {})
        for name in package_references(files[path]):
            if name in plugins and name not in dev_deps:
                issues.append(
                    f'{path} imports "{name}" but it is not listed in devDependencies '
                    f'(add "{name}": "{plugins[name]}")'
                )

        if bundler in ENTRY_POINT_BUNDLERS:
            base = _project_base(path)
            html_entry = base + HTML_ENTRY
            if html_entry not in files:
                issues.append(f'{path} requires an HTML entry file "{html_entry}"')
            candidates = [base + entry for entry in SOURCE_ENTRIES]
            if not any(c in files for c in candidates):
                issues.append(f"{path} requires a source entry file: one of {', '.join(candidates)}")


def _uses_react(files: Mapping[str, str]) -> bool:
    for path, content in files.items():
        if not is_source_file(path):
            continue
        names = package_references(content)
        if "react" in names or "react-dom" in names:
            return True
        if _REACT_LITERAL_RE.search(content or ""):
            return True
    return False


def validate_file_map(files: Mapping[str, str]) -> ValidationReport:
    """Check a file map for declared-dependency consistency. Read-only."""
    report = ValidationReport()
    issues = report.issues

    manifests = find_manifests(files)
    if not manifests:
        issues.append("Missing package.json")
        return report
    if len(manifests) > 1:
        issues.append(f"Expected exactly one package.json, found {len(manifests)}: {', '.join(manifests)}")
        return report

    manifest_path = manifests[0]
    try:
        manifest = json.loads(files[manifest_path])
    except json.JSONDecodeError as e:
        issues.append(f"package.json is not valid JSON: {e}")
        return report
    if not isinstance(manifest, dict):
        issues.append("package.json must contain a JSON object")
        return report

    for key in REQUIRED_FIELDS:
        if key not in manifest:
            issues.append(f'package.json is missing required field "{key}"')

    deps = _section(manifest, "dependencies", issues)
    dev_deps = _section(manifest, "devDependencies", issues)
    declared = set(deps) | set(dev_deps)

    missing = set()
    for path, content in files.items():
        if not is_source_file(path):
            continue
        for name in package_references(content):
            if name not in declared:
                missing.add(name)

    if missing:
        report.missing_dependencies = sorted(missing)
        listed = ", ".join(f'"{name}": "{SUGGESTED_VERSION}"' for name in report.missing_dependencies)
        issues.append(f"Missing dependencies in package.json: {listed}")

    _check_bundlers(files, dev_deps, issues)

    if _uses_react(files):
        for name, version in REACT_PACKAGES:
            if name not in deps:
                issues.append(f'React is used but "{name}" is missing from dependencies (add "{name}": "{version}")')

    if issues:
        logger.info("validation found %d issue(s) in %s", len(issues), manifest_path)
    return report
