"""Output tree rendering.

Builds a compressed view of the generated files where chains of directories
with a single child are folded onto one line, and annotates each file with
the variants credited for it::

    ╶ /home/me/packages/my-lib
      ╭ package.json   (internal.node, base, eslint)
      ├ .eslintrc.json (eslint)
      ╰ src/index.ts   (base)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from rich.console import Console
from rich.text import Text


@dataclass(frozen=True)
class TreeItem:
    """A file to display: its path split into segments, and its credited variants."""

    path: tuple[str, ...]
    variants: tuple[str, ...]

    @classmethod
    def from_path(cls, path: str, variants: Iterable[str], separator: str = "/") -> "TreeItem":
        return cls(tuple(path.split(separator)), tuple(variants))


@dataclass
class TreeNode:
    """One display line: a collapsed path, and either variants (file) or children."""

    segments: list[str]
    variants: tuple[str, ...] | None = None
    children: list["TreeNode"] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return bool(self.children)

    @property
    def display_path(self) -> str:
        return "/".join(self.segments)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def _group_by_head(items: Sequence[TreeItem]) -> dict[str, list[TreeItem]]:
    groups: dict[str, list[TreeItem]] = {}
    for item in items:
        groups.setdefault(item.path[0], []).append(item)
    return groups


def _split(members: Sequence[TreeItem]) -> tuple[TreeItem | None, list[TreeItem]]:
    """Separate the item ending at this segment from the items continuing below it."""
    leaf = next((m for m in members if len(m.path) == 1), None)
    rest = [TreeItem(m.path[1:], m.variants) for m in members if len(m.path) > 1]
    return leaf, rest


def build_tree(items: Sequence[TreeItem]) -> list[TreeNode]:
    """Group items by their first segment, folding single-child directory chains."""
    nodes: list[TreeNode] = []
    for head, members in _group_by_head([i for i in items if i.path]).items():
        segments = [head]
        leaf, rest = _split(members)

        while leaf is None and rest:
            groups = _group_by_head(rest)
            if len(groups) > 1:
                break
            (next_head, next_members), = groups.items()
            segments.append(next_head)
            leaf, rest = _split(next_members)

        if rest:
            nodes.append(TreeNode(segments, children=build_tree(rest)))
        else:
            nodes.append(TreeNode(segments, variants=leaf.variants if leaf else ()))
    return nodes


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_GUIDE_STYLE = "bright_black"
_DIRECTORY_STYLE = "bright_blue"
_FILE_STYLE = "bright_green"


def _line_character(index: int, count: int) -> str:
    if count == 1:
        return "╶"
    if index == 0:
        return "╭"
    if index == count - 1:
        return "╰"
    return "├"


def render_lines(nodes: Sequence[TreeNode], padding: str = "") -> list[Text]:
    """Render *nodes* as styled lines.

    Variant annotations line up in one column per sibling group, two spaces
    past the longest file line in that group.
    """
    lines: list[Text] = []
    file_widths = [
        len(padding) + 2 + len(node.display_path) for node in nodes if not node.is_directory
    ]
    column = max(file_widths, default=0)

    for index, node in enumerate(nodes):
        is_last = index == len(nodes) - 1
        line = Text()
        line.append(f"{padding}{_line_character(index, len(nodes))}", style=_GUIDE_STYLE)
        line.append(" ")

        if node.is_directory:
            line.append(node.display_path, style=_DIRECTORY_STYLE)
            lines.append(line)
            lines.extend(render_lines(node.children, padding + ("  " if is_last else "│ ")))
            continue

        parents, name = node.segments[:-1], node.segments[-1]
        if parents:
            line.append("/".join(parents) + "/", style=_DIRECTORY_STYLE)
        line.append(name, style=_FILE_STYLE)

        width = len(padding) + 2 + len(node.display_path)
        line.append(" " * (column - width + 2))
        line.append(f"({', '.join(node.variants or ())})", style=_GUIDE_STYLE)
        lines.append(line)
    return lines


def format_tree(items: Sequence[TreeItem]) -> str:
    """Plain-text rendering of *items*, one line per node."""
    return "\n".join(line.plain for line in render_lines(build_tree(items)))


def print_tree(items: Sequence[TreeItem], console: Console) -> None:
    """Print the styled tree for *items* to *console*."""
    for line in render_lines(build_tree(items)):
        console.print(line, soft_wrap=True, highlight=False)
