"""Ignore matchers answering root-relative posix path queries.

Tree builders only depend on the ``IgnoreMatcher`` protocol. Directory queries
carry a trailing slash (``"build/"``) so directory-only patterns apply.
Concrete matchers here cover gitignore-style pattern lists and the set of
paths git itself reports as ignored.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pathspec import PathSpec


GITIGNORE_MATCHER_CACHE_MAX = 64
GITIGNORE_MATCHER_CACHE_TTL_SECONDS = 2.0

_VCS_AND_OS = (".git/", ".hg/", ".svn/", ".DS_Store", "Thumbs.db")
_LOGS_AND_TEMP = ("*.log", "*.tmp", "*.temp", "*.bak", "*.old", "*.swp", "*.swo", "*.~")
_BINARIES_AND_MEDIA = (
    "*.exe", "*.dll", "*.so", "*.dylib", "*.bin", "*.dat",
    "*.zip", "*.tar", "*.gz", "*.bz2", "*.tgz", "*.rar", "*.7z",
    "*.jpg", "*.jpeg", "*.png", "*.gif", "*.bmp", "*.ico", "*.svg",
    "*.mp3", "*.wav", "*.flac", "*.aac", "*.ogg",
    "*.mp4", "*.avi", "*.mov", "*.mkv", "*.webm",
    "*.pdf", "*.doc", "*.docx", "*.xls", "*.xlsx", "*.ppt", "*.pptx",
    "*.ttf", "*.otf", "*.woff", "*.woff2",
)
_JAVASCRIPT = (
    "node_modules/", "dist/", "build/", "out/", ".next/", ".nuxt/", ".vuepress/", ".gatsby-cache/",
    "*.min.*", "coverage/", ".nyc_output/", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "*.bundle.js", "*.chunk.js", "*.map", ".eslintcache", ".cache/",
)
_PYTHON = (
    "__pycache__/", ".pytest_cache/", ".mypy_cache/", "*.py[cod]", "*.pyd",
    "*.egg", "*.egg-info/", "*.whl", ".venv/", "venv/",
)
_PHP = ("vendor/", "composer.lock", "*.phar", "*.phps", "*.phpt", ".phpunit.result.cache")
_JAVA = ("*.class", "*.jar", "*.war", "*.ear", "target/", ".gradle/", ".mvn/", "hs_err_pid*.log")
_DOTNET = (
    "bin/", "obj/", "*.dll", "*.pdb", "*.exe", "*.mdb", "*.suo", "*.user",
    "*.userosscache", "*.sln.docstates", ".vs/", "packages/",
)
_GO = ("vendor/", "*.test", "*.exe", "*.out", "*.a", "*.mod", "*.sum")
_RUST = ("target/", "Cargo.lock")
_CPP = ("*.o", "*.obj", "*.so", "*.a", "*.lib", "*.dSYM/", "build/", "cmake-build-debug/")
_SWIFT = ("DerivedData/", "*.xcodeproj/", "*.xcworkspace/", "*.xcuserstate", "Pods/")
_ANDROID = ("build/", "app/build/", "*.apk", "*.aab")
_TERRAFORM = (".terraform/", "*.tfstate", "*.tfstate.*", "*.tfvars")
_DOCKER = ("Dockerfile.*.swp", "docker-compose.override.yml", ".docker/")
_KUBERNETES = ("kubeconfig", "*.kube/*.yaml")
_EDITORS_AND_INFRA = (".idea/", "*.iml", ".vscode/", ".cache/", ".history/", ".env.local", ".env.*.local")

# Grouped by stack; duplicates across groups are kept once, in first-seen order.
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = tuple(
    dict.fromkeys(
        _VCS_AND_OS
        + _LOGS_AND_TEMP
        + _BINARIES_AND_MEDIA
        + _JAVASCRIPT
        + _PYTHON
        + _PHP
        + _JAVA
        + _DOTNET
        + _GO
        + _RUST
        + _CPP
        + _SWIFT
        + _ANDROID
        + _TERRAFORM
        + _DOCKER
        + _KUBERNETES
        + _EDITORS_AND_INFRA
    )
)


class IgnoreMatcher(Protocol):
    def ignores(self, path: str) -> bool: ...


class NullIgnoreMatcher:
    """Matcher that ignores nothing."""

    def ignores(self, path: str) -> bool:
        return False


NULL_IGNORE_MATCHER = NullIgnoreMatcher()


class PatternIgnoreMatcher:
    """Gitignore-style pattern list compiled with ``pathspec``."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(pattern for pattern in patterns if pattern.strip())
        self._spec = PathSpec.from_lines("gitwildmatch", self.patterns)

    def ignores(self, path: str) -> bool:
        if not path or path == "/":
            return False
        return self._spec.match_file(path)


class CombinedIgnoreMatcher:
    """Ignore a path when any member matcher ignores it."""

    def __init__(self, *matchers: IgnoreMatcher) -> None:
        self.matchers = matchers

    def ignores(self, path: str) -> bool:
        return any(matcher.ignores(path) for matcher in self.matchers)


@dataclass(frozen=True)
class _MatcherCacheEntry:
    """Cached matcher plus root directory mtime and insertion timestamp."""

    matcher: GitIgnoreMatcher | None
    root_mtime_ns: int | None
    loaded_at: float


_GITIGNORE_MATCHER_CACHE: OrderedDict[str, _MatcherCacheEntry] = OrderedDict()


def clear_gitignore_cache() -> None:
    """Clear cached gitignore matchers."""
    _GITIGNORE_MATCHER_CACHE.clear()


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Snapshot of git-ignored paths below ``root``, keyed by relative posix path.

    Ignoring a directory ignores everything beneath it, so queries walk up the
    path segments and stop at the first ignored ancestor.
    """

    root: Path
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def ignores(self, path: str) -> bool:
        relative = path.strip("/")
        if not relative:
            return False
        if relative in self.ignored_files:
            return True
        current = relative
        while current:
            if current in self.ignored_dirs:
                return True
            current = current.rpartition("/")[0]
        return False


def _load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher by querying git for ignored files/directories.

    Returns ``None`` when git is unavailable, ``root`` is not inside a repo, or
    any probing command fails. Only paths within ``root`` are tracked, even
    when the repository root is higher.
    """
    if shutil.which("git") is None:
        return None

    root = root.resolve()
    try:
        top_proc = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    top_level = top_proc.stdout.strip()
    if not top_level:
        return None

    repo_root = Path(top_level).resolve()
    if not _is_within(root, repo_root):
        return None

    try:
        proc = subprocess.run(
            [
                "git",
                "-C",
                str(repo_root),
                "ls-files",
                "-z",
                "--others",
                "-i",
                "--exclude-standard",
                "--directory",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        abs_path = repo_root / rel
        if not _is_within(abs_path, root):
            continue
        root_relative = abs_path.relative_to(root).as_posix()
        if root_relative in ("", "."):
            continue
        if is_dir or abs_path.is_dir():
            ignored_dirs.add(root_relative)
        else:
            ignored_files.add(root_relative)

    return GitIgnoreMatcher(
        root=root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return cached matcher for ``root`` with bounded staleness."""
    resolved_root = root.resolve()
    key = str(resolved_root)
    try:
        root_mtime_ns: int | None = int(resolved_root.stat().st_mtime_ns)
    except OSError:
        root_mtime_ns = None
    now = time.monotonic()

    cached = _GITIGNORE_MATCHER_CACHE.get(key)
    if cached is not None:
        cache_age = now - cached.loaded_at
        if (
            cached.root_mtime_ns == root_mtime_ns
            and cache_age <= GITIGNORE_MATCHER_CACHE_TTL_SECONDS
        ):
            _GITIGNORE_MATCHER_CACHE.move_to_end(key)
            return cached.matcher

    matcher = _load_matcher(resolved_root)
    _GITIGNORE_MATCHER_CACHE[key] = _MatcherCacheEntry(
        matcher=matcher,
        root_mtime_ns=root_mtime_ns,
        loaded_at=now,
    )
    _GITIGNORE_MATCHER_CACHE.move_to_end(key)
    while len(_GITIGNORE_MATCHER_CACHE) > GITIGNORE_MATCHER_CACHE_MAX:
        _GITIGNORE_MATCHER_CACHE.popitem(last=False)
    return matcher


def build_ignore_matcher(
    root: Path,
    patterns: Iterable[str] = (),
    use_gitignore: bool = False,
) -> IgnoreMatcher:
    """Assemble one matcher from pattern lines and, optionally, git's view."""
    matchers: list[IgnoreMatcher] = []
    pattern_list = [pattern for pattern in patterns if pattern.strip()]
    if pattern_list:
        matchers.append(PatternIgnoreMatcher(pattern_list))
    if use_gitignore:
        git_matcher = get_gitignore_matcher(root)
        if git_matcher is not None:
            matchers.append(git_matcher)
    if not matchers:
        return NULL_IGNORE_MATCHER
    if len(matchers) == 1:
        return matchers[0]
    return CombinedIgnoreMatcher(*matchers)


__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "IgnoreMatcher",
    "NullIgnoreMatcher",
    "NULL_IGNORE_MATCHER",
    "PatternIgnoreMatcher",
    "CombinedIgnoreMatcher",
    "GitIgnoreMatcher",
    "clear_gitignore_cache",
    "get_gitignore_matcher",
    "build_ignore_matcher",
]
