"""
Configuration loader - optional per-project YAML / pyproject settings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

from .errors import ConfigError

logger = logging.getLogger(__name__)


DEFAULT_ALIASES: Dict[str, str] = {
    "@": "/src",
    "~": "/src",
    "_": "/src",
    "@/components": "/src/components",
    "@/views": "/src/views",
    "_/components": "/src/components",
    "_/views": "/src/views",
}

DEFAULT_IGNORE_DIRS: List[str] = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "mock",
    "mocks",
    "__mocks__",
    "bin",
    "test",
    "tests",
    "__tests__",
    "env",
]

# Probing order used by the resolver; the first existing file wins.
RESOLVE_EXTENSIONS: List[str] = [".vue", ".ts", ".js", ".tsx", ".jsx", ".mjs", ".cjs"]
INDEX_FILES: List[str] = ["index.vue", "index.ts", "index.js", "index.tsx", "index.jsx"]

DEFAULT_STYLE_EXTENSIONS: List[str] = [".css", ".scss", ".sass", ".less", ".styl"]
DEFAULT_ASSET_EXTENSIONS: List[str] = [
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".avif", ".bmp",
    ".mp4", ".webm", ".ogg", ".mp3", ".wav", ".flac", ".aac",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    ".ico",
]
DEFAULT_CODE_EXTENSIONS: List[str] = [".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs"]

# Code files matching any of these never count as unused.
DEFAULT_CODE_IGNORE_PATTERNS: List[str] = [
    r"(^|/)vite\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)vue\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)vitest\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)jest\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)cypress\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)playwright\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)postcss\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)tailwind\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)babel\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)eslint\..*\.(js|cjs|mjs)$",
    r"(^|/)prettier\..*\.(js|cjs|mjs)$",
    r"(^|/)commitlint\..*\.(js|cjs|mjs)$",
    r"(^|/)\.eslintrc(\.(js|cjs|mjs|json|ya?ml))?$",
    r"(^|/)config/.*$",
    r"(^|/)mock/.*$",
    r"(^|/)mocks/.*$",
    r"(^|/)__mocks__/.*$",
    r"(^|/)bin/.*$",
    r"(^|/)test/.*$",
    r"(^|/)tests/.*$",
    r"(^|/)__tests__/.*$",
    r"(^|/).*\.(spec|test)\.(js|ts|jsx|tsx|mjs|cjs)$",
    r"(^|/)types/.*\.(ts|d\.ts)$",
    r"(^|/)typings/.*$",
    r"(^|/)@types/.*$",
    r"(^|/)env\.d\.ts$",
    r"(^|/)auto-imports\.d\.ts$",
    r"(^|/)components\.d\.ts$",
    r"(^|/)shims-.*\.d\.ts$",
    r"(^|/)volar.*\.d\.ts$",
    r"(^|/)typing\.ts$",
    r"(^|/)typings\.ts$",
    r"(^|/)types\.ts$",
    r"(^|/).*\.types\.ts$",
    r"(^|/)plop-templates/.*$",
    r"(^|/)plopfile\.js$",
    r"(^|/).*\.config\.(js|ts|mjs|cjs)$",
    r"(^|/)\.env(\..*)?$",
    r"(?i)(^|/).*mock.*\.(js|ts|jsx|tsx|mjs|cjs)$",
]

DEFAULT_ENTRY_CANDIDATES: List[str] = [
    "main.ts", "main.js", "main.mjs", "main.cjs",
    "src/main.ts", "src/main.js", "src/main.mjs", "src/main.cjs",
    "src/App.vue", "App.vue",
    "src/router/index.ts", "src/router/index.js",
    "router/index.ts", "router/index.js",
]

CONFIG_FILE_NAMES: List[str] = [
    "vueprune.yaml",
    "vueprune.yml",
    ".vueprune.yaml",
    ".vueprune.yml",
    "pyproject.toml",  # only with [tool.vueprune]
]


@dataclass
class PruneConfig:
    """Effective settings for one analysis run."""
    aliases: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))
    ignore_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))
    component_extension: str = ".vue"
    asset_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_ASSET_EXTENSIONS))
    code_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_CODE_EXTENSIONS))
    style_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_STYLE_EXTENSIONS))
    resolve_extensions: List[str] = field(default_factory=lambda: list(RESOLVE_EXTENSIONS))
    index_files: List[str] = field(default_factory=lambda: list(INDEX_FILES))
    code_ignore_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_CODE_IGNORE_PATTERNS)
    )
    entry_candidates: List[str] = field(default_factory=lambda: list(DEFAULT_ENTRY_CANDIDATES))
    output_file: str = "unused-vue-files.txt"

    @property
    def source_extensions(self) -> List[str]:
        """Extensions whose files are scanned as script/template sources."""
        exts = [self.component_extension]
        for ext in self.resolve_extensions + self.code_extensions:
            if ext not in exts:
                exts.append(ext)
        return exts

    @property
    def known_extensions(self) -> List[str]:
        """Every extension the collector categorises or scans."""
        exts = list(self.source_extensions)
        for ext in self.style_extensions + self.asset_extensions:
            if ext not in exts:
                exts.append(ext)
        return exts

    def compiled_code_ignores(self) -> List[re.Pattern[str]]:
        compiled: List[re.Pattern[str]] = []
        for pat in self.code_ignore_patterns:
            try:
                compiled.append(re.compile(pat))
            except re.error as e:
                raise ConfigError(f"Invalid code_ignore_patterns entry {pat!r}: {e}") from e
        return compiled


def find_config_file(root: Path) -> Optional[Path]:
    """Find the project configuration file under ``root`` by priority."""
    for name in CONFIG_FILE_NAMES:
        candidate = root / name
        if not candidate.is_file():
            continue
        if candidate.name == "pyproject.toml":
            if _has_vueprune_config(candidate):
                return candidate
            continue
        return candidate
    return None


def load_config(root: Path, config_path: Optional[Path] = None) -> PruneConfig:
    """
    Load the project configuration.

    Args:
        root: analysed project root (searched when ``config_path`` is None)
        config_path: explicit configuration file

    Returns:
        PruneConfig: defaults merged with the file's settings

    Raises:
        ConfigError: the file is missing, malformed or fails validation
    """
    path = config_path or find_config_file(root)
    if path is None:
        logger.debug("No vueprune configuration found, using defaults")
        return PruneConfig()
    logger.debug("Using configuration file %s", path)
    return _load_config_file(path)


def _load_config_file(config_path: Path) -> PruneConfig:
    if not config_path.exists():
        raise ConfigError(f"Configuration file does not exist: {config_path}")

    suffix = config_path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                raw = tomli.load(f)
            if "tool" in raw and "vueprune" in raw["tool"]:
                data = raw["tool"]["vueprune"]
            else:
                data = raw
        else:
            raise ConfigError(f"Unsupported configuration format: {suffix}")
    except (OSError, yaml.YAMLError, tomli.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read configuration {config_path}: {e}") from e

    if not data:
        return PruneConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {config_path} must be a mapping")

    from .config_schema import validate_config_data
    from pydantic import ValidationError

    try:
        validate_config_data(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration {config_path}:\n{e}") from e

    return _parse_config_data(data)


def _has_vueprune_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open("rb") as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError):
        return False
    return "tool" in data and "vueprune" in data["tool"]


def _parse_config_data(data: Dict[str, Any]) -> PruneConfig:
    config = PruneConfig()

    if "aliases" in data:
        merged = dict(DEFAULT_ALIASES)
        merged.update({str(k): str(v) for k, v in (data["aliases"] or {}).items()})
        config.aliases = merged
    if "ignore_dirs" in data:
        config.ignore_dirs = [str(d) for d in data["ignore_dirs"]]
    if "extra_ignore_dirs" in data:
        for d in data["extra_ignore_dirs"]:
            if d not in config.ignore_dirs:
                config.ignore_dirs.append(str(d))
    if "component_extension" in data:
        config.component_extension = _dotted(data["component_extension"])
    if "asset_extensions" in data:
        config.asset_extensions = [_dotted(e) for e in data["asset_extensions"]]
    if "code_extensions" in data:
        config.code_extensions = [_dotted(e) for e in data["code_extensions"]]
    if "style_extensions" in data:
        config.style_extensions = [_dotted(e) for e in data["style_extensions"]]
    if "code_ignore_patterns" in data:
        config.code_ignore_patterns.extend(str(p) for p in data["code_ignore_patterns"])
    if "entry_candidates" in data:
        config.entry_candidates = [str(p) for p in data["entry_candidates"]]
    if "output_file" in data:
        config.output_file = str(data["output_file"])

    # fail early on bad regexes instead of mid-collection
    config.compiled_code_ignores()
    return config


def _dotted(ext: Any) -> str:
    ext = str(ext).strip().lower()
    return ext if ext.startswith(".") else "." + ext


def create_example_config() -> str:
    """Return the example vueprune.yaml content."""
    return """# vueprune configuration
# Every key is optional; omitted keys keep the built-in defaults.

# Extra aliases, merged over the defaults (@, ~, _ -> /src).
# Aliases found in vite/vue/webpack configs and tsconfig/jsconfig paths
# are discovered automatically and override these when they exist on disk.
aliases:
  "@": "/src"

# Directory names skipped everywhere (replaces the default list)
# ignore_dirs: [node_modules, .git, dist, build, mock, mocks, __mocks__, bin, test, tests, __tests__, env]

# Directory names added to the default list
extra_ignore_dirs: []

component_extension: ".vue"
# asset_extensions: [.png, .jpg, .svg, .woff2]
# code_extensions: [.js, .ts, .jsx, .tsx, .mjs, .cjs]

# Extra regexes (matched against root-relative paths) for code files that
# must never be reported as unused
code_ignore_patterns: []

# Entry files tried first, in order
# entry_candidates: [src/main.ts, src/main.js, src/App.vue]

output_file: "unused-vue-files.txt"
"""


def save_example_config(root: Path, force: bool = False) -> Path:
    """Write the example configuration into ``root``."""
    output_path = root / "vueprune.yaml"
    if output_path.exists() and not force:
        raise ConfigError(f"Configuration already exists: {output_path} (use --force)")
    output_path.write_text(create_example_config(), encoding="utf-8")
    return output_path
