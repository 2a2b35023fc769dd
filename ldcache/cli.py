"""ldcache CLI – inspect, validate, query, and export ld.so.cache."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from typing import Optional

import msgpack

from . import __version__, _blake3
from .errors import CacheError
from .format import describe_flags
from .reader import parse
from .soname import SonameError, read_soname
from .source import load_region, resolve_cache_path
from .view import CacheView

logger = logging.getLogger("ldcache")


# ── Terminal UI (colors when TTY, Unicode tables) ───────────────────────────

def _color_enabled() -> bool:
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False
    return os.environ.get("NO_COLOR", "").strip() == ""

_COLORS = {
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
    "cyan": "\033[36m",
    "bold": "\033[1m",
}

def _c(name: str, text: str) -> str:
    if not _color_enabled() or name not in _COLORS:
        return text
    return f"{_COLORS[name]}{text}{_COLORS['reset']}"

def _section(title: str) -> str:
    return _c("cyan", f"\n  ◆ {title}")

def _ok(msg: str) -> str:
    return _c("green", "✓ ") + msg

def _fail(msg: str) -> str:
    return _c("red", "✗ ") + msg

def _table(headers: list[str], rows: list[list[str]]) -> list[str]:
    """Box-drawn table; column widths follow the widest cell."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: list[str]) -> str:
        return "│" + "│".join(f" {s.ljust(w)} " for s, w in zip(cells, widths)) + "│"

    rule = ["─" * (w + 2) for w in widths]
    out = ["╭" + "┬".join(rule) + "╮", line(headers), "├" + "┼".join(rule) + "┤"]
    out.extend(line(r) for r in rows)
    out.append("╰" + "┴".join(rule) + "╯")
    return out

def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


# ── Loading ─────────────────────────────────────────────────────────────────


def _load(path: Optional[str]) -> CacheView:
    """Parse the cache or exit 1 with the error kind on stderr."""
    path = resolve_cache_path(path)
    t0 = time.perf_counter()
    try:
        region = load_region(path)
        logger.debug("read %d bytes from %s", len(region), path)
        view = parse(region)
    except CacheError as exc:
        print(_fail(f"{exc.kind}: {exc}"), file=sys.stderr)
        sys.exit(1)
    logger.debug(
        "parsed %d entries in %.1f ms", len(view), (time.perf_counter() - t0) * 1e3
    )
    return view


# ── inspect ─────────────────────────────────────────────────────────────────


def cmd_inspect(args: argparse.Namespace) -> None:
    view = _load(args.file)
    region = view.region
    print(_c("bold", "\n  ld.so.cache  ") + _c("dim", region.path or ""))
    print(_section("File"))
    print(f"    Size    {len(region)} bytes")
    digest = _blake3.hexdigest(region.data)
    if digest is not None:
        print(f"    BLAKE3  {digest}")

    lh, nh = view.legacy_header, view.new_header
    print(_section("Headers"))
    print(f"    legacy  {lh.magic_text}  nlibs={lh.nlibs}")
    print(
        f"    new     {nh.magic_text}  nlibs={nh.nlibs}  "
        f"stringslen={nh.stringslen}  offset={nh.offset}"
    )

    entries = view.entries
    show = min(args.max_entries or len(entries), len(entries))
    print(_section(f"Entries ({len(entries)}, showing {show})"))
    rows = [
        [
            str(i), _clip(e.key, 36), _clip(e.value, 52),
            f"0x{e.flags & 0xffff:04x}", describe_flags(e.flags),
            str(e.osversion), f"0x{e.hwcap:x}",
        ]
        for i, e in enumerate(entries[:show])
    ]
    headers = ["#", "Key", "Value", "Flags", "Kind", "OS", "HWCap"]
    for line in _table(headers, rows):
        print("  " + line)
    if len(entries) > show:
        print(_c("dim", f"\n  … and {len(entries) - show} more (use --max-entries to show more)"))
    print()


# ── validate ────────────────────────────────────────────────────────────────


def cmd_validate(args: argparse.Namespace) -> None:
    view = _load(args.file)
    print(_ok(
        f"{view.region.path}: {len(view)} entries "
        f"({view.legacy_header.nlibs} legacy)."
    ))


# ── lookup ──────────────────────────────────────────────────────────────────


def cmd_lookup(args: argparse.Namespace) -> None:
    view = _load(args.file)
    matches = view.find(args.name)
    if not matches:
        print(_fail(f"{args.name} not in cache"), file=sys.stderr)
        sys.exit(1)
    for e in matches:
        kind = describe_flags(e.flags)
        print(f"{e.value}" + (_c("dim", f"  ({kind})") if kind else ""))


# ── dump ────────────────────────────────────────────────────────────────────


def cmd_dump(args: argparse.Namespace) -> None:
    view = _load(args.file)
    doc = view.to_dict()
    if args.format == "msgpack":
        payload = msgpack.packb(doc, use_bin_type=True, unicode_errors="surrogateescape")
    else:
        payload = (json.dumps(doc, indent=2) + "\n").encode()

    if args.output:
        with open(args.output, "wb") as f:
            f.write(payload)
        print(_ok(f"Wrote {len(view)} entries → {args.output}"))
    else:
        sys.stdout.buffer.write(payload)
        sys.stdout.flush()


# ── soname ──────────────────────────────────────────────────────────────────


def cmd_soname(args: argparse.Namespace) -> None:
    try:
        print(read_soname(args.file))
    except SonameError as exc:
        print(_fail(str(exc)), file=sys.stderr)
        sys.exit(1)


# ── Entry point ─────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="ldcache", description="ld.so.cache reader"
    )
    parser.add_argument(
        "--version", action="version", version=f"ldcache {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    sub = parser.add_subparsers(dest="command")
    file_help = "cache file (default: $LDCACHE_PATH or /etc/ld.so.cache)"

    # inspect / info
    p = sub.add_parser("inspect", help="Show headers and entries", aliases=["info"])
    p.add_argument("file", nargs="?", help=file_help)
    p.add_argument("--max-entries", type=int, default=None)

    # validate
    p = sub.add_parser("validate", help="Parse and report the first error, if any")
    p.add_argument("file", nargs="?", help=file_help)

    # lookup
    p = sub.add_parser("lookup", help="Print the paths a library name maps to")
    p.add_argument("name", help="library name, e.g. libc.so.6")
    p.add_argument("file", nargs="?", help=file_help)

    # dump
    p = sub.add_parser("dump", help="Export headers and entries")
    p.add_argument("file", nargs="?", help=file_help)
    p.add_argument("--format", choices=["json", "msgpack"], default="json")
    p.add_argument("--output", "-o", help="write to file instead of stdout")

    # soname
    p = sub.add_parser("soname", help="Print the DT_SONAME of an ELF shared object")
    p.add_argument("file")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    cmds = {
        "inspect": cmd_inspect,
        "info": cmd_inspect,  # alias
        "validate": cmd_validate,
        "lookup": cmd_lookup,
        "dump": cmd_dump,
        "soname": cmd_soname,
    }
    fn = cmds.get(args.command)
    if fn:
        fn(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
