from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Tuple

from .config import ExpanderCfg, find_vault_root, load_config
from .docstore.vault import FsVault
from .errors import DocumentNotFoundError, EmbexUserError
from .expand import Expander, Resolver, scan_embeds
from .jsonic import dumps as jdumps
from .logs import setup_logging
from .markdown.frontmatter import parse_frontmatter
from .markdown.parser import parse_markdown
from .report_schema import BlockInfo, EmbedInfo, HeadingInfo, OutlineReport, RefsReport
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="embex",
        description="Expand ![[...]] embeds of markdown notes into plain text",
        add_help=True,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="more log output on stderr (-v: info, -vv: debug)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("file", help="note the selection belongs to (base of link resolution)")
        sp.add_argument(
            "--vault",
            metavar="DIR",
            help="vault root (default: nearest folder with .embex.yaml or .obsidian/, else the note's folder)",
        )

    sp_expand = sub.add_parser("expand", help="Print the expanded selection")
    add_common(sp_expand)
    sel = sp_expand.add_mutually_exclusive_group()
    sel.add_argument(
        "--lines",
        metavar="A:B",
        help="selection as a 1-based inclusive line range of FILE (A: or :B allowed)",
    )
    sel.add_argument(
        "--text",
        metavar="TEXT|@FILE|-",
        help="selection given directly: a string, @file to read it from a file, - for stdin",
    )
    sp_expand.add_argument(
        "--max-depth",
        type=int,
        metavar="N",
        help="depth limit (default: max_depth from .embex.yaml, 4 if unset)",
    )

    sp_refs = sub.add_parser("refs", help="JSON: embeds of FILE and what they resolve to")
    add_common(sp_refs)

    sp_outline = sub.add_parser("outline", help="JSON: headings and block anchors of FILE")
    add_common(sp_outline)

    return p


def _open_vault(file_arg: str, vault_arg: Optional[str]) -> Tuple[FsVault, ExpanderCfg, str, Path]:
    """
    Vault, settings, vault-relative path and absolute path of the base note.
    """
    file_path = Path(file_arg).resolve()
    if not file_path.is_file():
        raise DocumentNotFoundError(file_arg)

    if vault_arg:
        root = Path(vault_arg).resolve()
    else:
        root = find_vault_root(file_path) or file_path.parent

    cfg = load_config(root)
    vault = FsVault(root, cfg)
    try:
        rel = vault.relpath(file_path)
    except ValueError:
        raise EmbexUserError(f"{file_arg} is outside of the vault {root}") from None
    return vault, cfg, rel, file_path


def _parse_lines(value: str, total: int) -> Tuple[int, int]:
    """'A:B' (1-based, inclusive) → slice bounds [a, b)."""
    if ":" not in value:
        raise ValueError(f"Invalid line range '{value}'. Expected 'A:B'")
    a_raw, b_raw = value.split(":", 1)
    try:
        a = int(a_raw) if a_raw.strip() else 1
        b = int(b_raw) if b_raw.strip() else total
    except ValueError:
        raise ValueError(f"Invalid line range '{value}'. Expected integers") from None
    if a < 1 or b < a:
        raise ValueError(f"Invalid line range '{value}'")
    return a - 1, min(b, total)


def _parse_text(text_arg: str) -> str:
    """
    --text value: a direct string, @path/to/file or - for stdin.
    """
    if text_arg == "-":
        return sys.stdin.read()
    if text_arg.startswith("@"):
        file_path = Path(text_arg[1:])
        if not file_path.is_file():
            raise ValueError(f"Selection file not found: {file_path}")
        return file_path.read_text(encoding="utf-8")
    return text_arg


def _selection(ns: argparse.Namespace, file_path: Path) -> str:
    if ns.text is not None:
        return _parse_text(ns.text)
    full = file_path.read_text(encoding="utf-8")
    if ns.lines is None:
        return full
    lines = full.split("\n")
    a, b = _parse_lines(ns.lines, len(lines))
    return "\n".join(lines[a:b])


def _cmd_expand(ns: argparse.Namespace) -> int:
    vault, cfg, rel, file_path = _open_vault(ns.file, ns.vault)
    selection = _selection(ns, file_path)
    max_depth = cfg.max_depth if ns.max_depth is None else ns.max_depth
    if max_depth < 0:
        raise ValueError("--max-depth must not be negative")
    expander = Expander(
        vault,
        max_depth=max_depth,
        text_extensions=cfg.text_extensions,
        strip_frontmatter=cfg.strip_frontmatter,
    )
    out = asyncio.run(expander.expand(selection, rel))
    sys.stdout.write(out)
    return 0


def _one_based(line_range: Optional[Tuple[int, Optional[int]]]) -> Optional[list]:
    """[start, end_excl) 0-based → [first, last] 1-based; None last means end of note."""
    if line_range is None:
        return None
    start, end = line_range
    return [start + 1, end]


async def _collect_refs(vault: FsVault, cfg: ExpanderCfg, rel: str, text: str) -> RefsReport:
    resolver = Resolver(vault, text_extensions=cfg.text_extensions)
    report = RefsReport(document=rel)
    for ref in scan_embeds(text):
        res = await resolver.resolve(ref, rel)
        report.embeds.append(EmbedInfo(
            raw=ref.raw,
            target=ref.target,
            alias=ref.alias,
            line=text.count("\n", 0, ref.start) + 1,
            outcome=res.outcome.value,
            resolved_path=res.document.path if res.document else None,
            section=res.section.value if res.ok else None,
            line_range=_one_based(res.line_range),
            fallback=res.fallback.value if res.fallback else None,
            error=res.error,
        ))
    return report


def _cmd_refs(ns: argparse.Namespace) -> int:
    vault, cfg, rel, file_path = _open_vault(ns.file, ns.vault)
    text = file_path.read_text(encoding="utf-8")
    report = asyncio.run(_collect_refs(vault, cfg, rel, text))
    sys.stdout.write(jdumps(report.model_dump(mode="json", by_alias=True)))
    return 0


def _cmd_outline(ns: argparse.Namespace) -> int:
    _, _, rel, file_path = _open_vault(ns.file, ns.vault)
    text = file_path.read_text(encoding="utf-8")
    doc = parse_markdown(text)
    frontmatter, _ = parse_frontmatter(text)
    report = OutlineReport(
        document=rel,
        frontmatter=frontmatter,
        headings=[HeadingInfo(text=h.title, level=h.level, line=h.start_line + 1, slug=h.slug)
                  for h in doc.headings],
        blocks=[BlockInfo(id=k, start_line=v.start_line + 1, end_line=v.end_line + 1)
                for k, v in doc.blocks.items()],
    )
    sys.stdout.write(jdumps(report.model_dump(mode="json", by_alias=True)))
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    setup_logging(ns.verbose)

    try:
        if ns.cmd == "expand":
            return _cmd_expand(ns)
        if ns.cmd == "refs":
            return _cmd_refs(ns)
        if ns.cmd == "outline":
            return _cmd_outline(ns)
    except EmbexUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
