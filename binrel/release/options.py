"""Command-line option parsing for release commands.

Release commands accept loosely spelled flags (``--zipFile``, ``--zip-file``,
``--filename`` all mean the zip path) and user-friendly platform names. This
module turns raw arguments into a canonical ``ReleaseOptions`` record; the
interactive filling of missing fields lives in ``resolver``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from binrel.platform.detection import Platform, detect_platform

__all__ = [
    "OPTION_ALIASES",
    "OptionField",
    "ReleaseOptions",
    "apply_positional",
    "normalize_platform",
    "parse_options",
    "tokenize_argv",
]

log = logging.getLogger(__name__)

OptionField = Literal["version", "platform", "zip", "commit"]
RawValue = str | bool

# canonical field -> accepted spellings; the first spelling present wins
OPTION_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("version", ("version", "v")),
    ("platform", ("platform", "p")),
    ("zip", ("zip", "zipFile", "zip-file", "filename")),
    ("skip_clean", ("skip-clean", "skipClean")),
    ("skip_tests", ("skip-tests", "skipTests")),
    ("commit", ("commit",)),
)

_BOOLEAN_FIELDS = frozenset({"skip_clean", "skip_tests", "commit"})
_BOOLEAN_SPELLINGS = frozenset(
    alias for name, aliases in OPTION_ALIASES if name in _BOOLEAN_FIELDS for alias in aliases
)
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})

PLATFORM_ALIASES: dict[str, Platform] = {
    "linux": Platform.LINUX,
    "darwin": Platform.DARWIN,
    "mac": Platform.DARWIN,
    "macos": Platform.DARWIN,
    "osx": Platform.DARWIN,
    "win32": Platform.WIN32,
    "win": Platform.WIN32,
    "windows": Platform.WIN32,
}

# only these hosts can build their own binary, so they imply the platform
_INFERRED_HOSTS = frozenset({Platform.LINUX, Platform.WIN32})


def _no_positional() -> list[str]:
    return []


@dataclass(slots=True)
class ReleaseOptions:
    """Options shared by every release stage.

    Created from argv at process start and passed by reference through the
    stage chain; stages fill in derived fields (``zip`` after zipping).
    """

    version: str | None = None
    platform: str | None = None
    zip: str | None = None
    commit: bool | None = None
    skip_clean: bool = False
    run_tests: bool = True
    platform_inferred: bool = False
    positional: list[str] = field(default_factory=_no_positional)

    def is_missing(self, name: OptionField) -> bool:
        value: object = getattr(self, name)
        return value is None or (isinstance(value, str) and not value.strip())

    @property
    def known_platform(self) -> Platform | None:
        if self.platform is None:
            return None
        try:
            return Platform(self.platform)
        except ValueError:
            return None


def normalize_platform(value: str) -> str:
    """Map user-friendly names (win, windows, mac) to release platform names.

    Unknown names are returned stripped but otherwise unchanged.
    """
    cleaned = value.strip()
    platform = PLATFORM_ALIASES.get(cleaned.lower())
    return platform.value if platform is not None else cleaned


def _is_flag(token: str) -> bool:
    return token.startswith("-") and len(token) > 1 and token != "--"


def tokenize_argv(argv: list[str]) -> tuple[dict[str, RawValue], list[str]]:
    """Split argv into a flat ``{flag: value}`` record and positional words.

    ``--key value``, ``--key=value``, ``-k value``, bare ``--flag`` (True) and
    ``--no-flag`` (False) are recognised; ``--`` ends option parsing. Known
    boolean flags never consume the following word.
    """
    record: dict[str, RawValue] = {}
    positional: list[str] = []

    i = 0
    while i < len(argv):
        token = argv[i]
        i += 1

        if token == "--":
            positional.extend(argv[i:])
            break
        if not _is_flag(token):
            positional.append(token)
            continue

        key = token.lstrip("-")
        if "=" in key:
            key, value = key.split("=", 1)
            record[key] = value
            continue
        if key.startswith("no-") and len(key) > 3:
            record[key[3:]] = False
            continue
        if key in _BOOLEAN_SPELLINGS:
            record[key] = True
            continue
        if i < len(argv) and not _is_flag(argv[i]):
            record[key] = argv[i]
            i += 1
            continue
        record[key] = True

    return record, positional


def _as_bool(value: RawValue) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() not in _FALSE_WORDS


def _as_str(value: RawValue) -> str | None:
    # a value-less string flag (`--version` alone) counts as missing
    if isinstance(value, bool):
        return None
    return value.strip() or None


def _pick(record: dict[str, RawValue], aliases: tuple[str, ...]) -> RawValue | None:
    for alias in aliases:
        if alias in record:
            return record[alias]
    return None


def parse_options(argv: list[str], *, host: Platform | None = None) -> ReleaseOptions:
    """Parse release arguments into canonical options.

    Args:
        argv: Arguments after the command name.
        host: Host platform used to infer ``platform`` when it is not given
            (defaults to the detected host).

    Returns:
        The parsed options; fields not given on the command line stay unset.
    """
    record, positional = tokenize_argv(argv)
    opts = ReleaseOptions(positional=positional)

    consumed: set[str] = set()
    for name, aliases in OPTION_ALIASES:
        consumed.update(aliases)
        value = _pick(record, aliases)
        if value is None:
            continue
        match name:
            case "version":
                opts.version = _as_str(value)
            case "platform":
                raw = _as_str(value)
                opts.platform = normalize_platform(raw) if raw else None
            case "zip":
                opts.zip = _as_str(value)
            case "skip_clean":
                opts.skip_clean = _as_bool(value)
            case "skip_tests":
                if _as_bool(value):
                    opts.run_tests = False
            case "commit":
                opts.commit = _as_bool(value)

    ignored = sorted(k for k in record if k not in consumed)
    if ignored:
        log.debug("ignoring unknown flags: %s", ", ".join(ignored))

    host_platform = host or detect_platform()
    if opts.platform is None and host_platform in _INFERRED_HOSTS:
        opts.platform = host_platform.value
        opts.platform_inferred = True

    log.debug("parsed command line options: %s", opts)
    return opts


def apply_positional(options: ReleaseOptions, fields: tuple[OptionField, ...]) -> ReleaseOptions:
    """Fill ``fields`` from positional words, in order, where not already given.

    ``build linux 5.0.0`` passes platform and version positionally; an
    explicit flag still takes precedence over a positional word.
    """
    for name, word in zip(fields, options.positional):
        if name == "platform":
            if options.platform is None or options.platform_inferred:
                options.platform = normalize_platform(word)
                options.platform_inferred = False
        elif options.is_missing(name):
            setattr(options, name, word.strip() or None)
    return options
