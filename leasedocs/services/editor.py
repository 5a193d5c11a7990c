"""Headless rich text editing surface.

Content is HTML restricted to what the editor toolbar can produce:

    <p>, <h1>, <h2>, <ul>/<ol> with <li>, <hr>, and inline
    <strong>, <em>, <u>, <span style="font-family: ..; font-size: ..">

parse_html/render_html convert between that markup and an immutable
RichDocument. Canonical markup (what render_html emits) survives
parse -> render unchanged, and an editor that was never edited hands back
the exact string it was loaded with.
"""

import html
import logging
from enum import Enum
from typing import Callable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from pydantic import BaseModel, ConfigDict

from leasedocs.errors import InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    HORIZONTAL_RULE = "horizontal_rule"


class Mark(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"


class TextRun(BaseModel):
    """Text sharing one set of marks"""
    model_config = ConfigDict(frozen=True)

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    font_family: Optional[str] = None
    font_size: Optional[str] = None

    def same_marks(self, other: "TextRun") -> bool:
        return self.model_dump(exclude={"text"}) == other.model_dump(exclude={"text"})


class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    level: Optional[int] = None
    runs: tuple[TextRun, ...] = ()
    items: tuple[tuple[TextRun, ...], ...] = ()

    @property
    def is_list(self) -> bool:
        return self.kind in (BlockKind.BULLET_LIST, BlockKind.ORDERED_LIST)


class RichDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocks: tuple[Block, ...] = ()


class Selection(BaseModel):
    """A character range inside one block (or one list item)"""
    block: int
    start: int
    end: int
    item: Optional[int] = None


def normalize_runs(runs) -> tuple[TextRun, ...]:
    """Drop empty runs and merge neighbours with identical marks."""
    merged: list[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].same_marks(run):
            merged[-1] = merged[-1].model_copy(update={"text": merged[-1].text + run.text})
        else:
            merged.append(run)
    return tuple(merged)


def runs_text(runs) -> str:
    return "".join(run.text for run in runs)


def _split_at(runs, offset: int) -> tuple[list[TextRun], list[TextRun]]:
    left, right = [], []
    pos = 0
    for run in runs:
        end = pos + len(run.text)
        if end <= offset:
            left.append(run)
        elif pos >= offset:
            right.append(run)
        else:
            cut = offset - pos
            left.append(run.model_copy(update={"text": run.text[:cut]}))
            right.append(run.model_copy(update={"text": run.text[cut:]}))
        pos = end
    return left, right


def _split_range(runs, start: int, end: int):
    before, rest = _split_at(runs, start)
    middle, after = _split_at(rest, end - start)
    return before, middle, after


# ---------------------------------------------------------------------------
# HTML <-> RichDocument
# ---------------------------------------------------------------------------

_CONTAINER_TAGS = {"html", "body", "div", "section", "article", "main", "header", "footer"}
_HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 2, "h4": 2, "h5": 2, "h6": 2}


def _parse_style(style: str) -> dict:
    marks = {}
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop, value = prop.strip().lower(), value.strip()
        if prop == "font-family" and value:
            marks["font_family"] = value
        elif prop == "font-size" and value:
            marks["font_size"] = value
    return marks


def _is_text(node) -> bool:
    # Comment, Doctype, Script etc. subclass NavigableString but are not content
    return type(node) is NavigableString


def _parse_inline_node(node, marks: dict, skip_lists: bool = False) -> list[TextRun]:
    if _is_text(node):
        return [TextRun(text=str(node), **marks)]
    if not isinstance(node, Tag):
        return []
    name = node.name.lower()
    if skip_lists and name in ("ul", "ol"):
        return []
    if name == "br":
        return [TextRun(text="\n", **marks)]
    child_marks = dict(marks)
    if name in ("strong", "b"):
        child_marks["bold"] = True
    elif name in ("em", "i"):
        child_marks["italic"] = True
    elif name == "u":
        child_marks["underline"] = True
    elif name == "span":
        child_marks.update(_parse_style(node.get("style", "")))
    return _parse_inline(node, child_marks, skip_lists)


def _parse_inline(node: Tag, marks: dict, skip_lists: bool = False) -> list[TextRun]:
    runs: list[TextRun] = []
    for child in node.children:
        runs.extend(_parse_inline_node(child, marks, skip_lists))
    return runs


def _parse_list_items(node: Tag) -> list[tuple[TextRun, ...]]:
    items = []
    for li in node.find_all("li", recursive=False):
        items.append(normalize_runs(_parse_inline(li, {}, skip_lists=True)))
        # nested lists are flattened into the parent list
        for nested in li.find_all(["ul", "ol"], recursive=False):
            items.extend(_parse_list_items(nested))
    return items


def _parse_blocks(node: Tag, blocks: list[Block]) -> None:
    loose: list[TextRun] = []

    def flush():
        runs = normalize_runs(loose)
        if runs_text(runs).strip():
            blocks.append(Block(kind=BlockKind.PARAGRAPH, runs=runs))
        loose.clear()

    for child in node.children:
        if _is_text(child):
            loose.append(TextRun(text=str(child)))
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name == "p":
            flush()
            blocks.append(Block(kind=BlockKind.PARAGRAPH, runs=normalize_runs(_parse_inline(child, {}))))
        elif name in _HEADING_TAGS:
            flush()
            blocks.append(Block(
                kind=BlockKind.HEADING,
                level=_HEADING_TAGS[name],
                runs=normalize_runs(_parse_inline(child, {})),
            ))
        elif name in ("ul", "ol"):
            flush()
            kind = BlockKind.BULLET_LIST if name == "ul" else BlockKind.ORDERED_LIST
            blocks.append(Block(kind=kind, items=tuple(_parse_list_items(child))))
        elif name == "hr":
            flush()
            blocks.append(Block(kind=BlockKind.HORIZONTAL_RULE))
        elif name in _CONTAINER_TAGS:
            flush()
            _parse_blocks(child, blocks)
        else:
            loose.extend(_parse_inline_node(child, {}))
    flush()


def parse_html(content: str) -> RichDocument:
    """Parse editor markup into a RichDocument."""
    soup = BeautifulSoup(content or "", "html.parser")
    blocks: list[Block] = []
    _parse_blocks(soup, blocks)
    return RichDocument(blocks=tuple(blocks))


def _render_run(run: TextRun) -> str:
    out = html.escape(run.text, quote=False)
    styles = []
    if run.font_family:
        styles.append(f"font-family: {run.font_family}")
    if run.font_size:
        styles.append(f"font-size: {run.font_size}")
    if styles:
        out = f'<span style="{html.escape("; ".join(styles), quote=True)}">{out}</span>'
    if run.underline:
        out = f"<u>{out}</u>"
    if run.italic:
        out = f"<em>{out}</em>"
    if run.bold:
        out = f"<strong>{out}</strong>"
    return out


def render_inline(runs) -> str:
    return "".join(_render_run(run) for run in runs)


def render_html(document: RichDocument) -> str:
    """Serialize a RichDocument to canonical editor markup."""
    parts = []
    for block in document.blocks:
        if block.kind == BlockKind.PARAGRAPH:
            parts.append(f"<p>{render_inline(block.runs)}</p>")
        elif block.kind == BlockKind.HEADING:
            level = block.level or 1
            parts.append(f"<h{level}>{render_inline(block.runs)}</h{level}>")
        elif block.is_list:
            tag = "ul" if block.kind == BlockKind.BULLET_LIST else "ol"
            items = "".join(f"<li>{render_inline(item)}</li>" for item in block.items)
            parts.append(f"<{tag}>{items}</{tag}>")
        elif block.kind == BlockKind.HORIZONTAL_RULE:
            parts.append("<hr>")
        else:
            raise ValueError(f"Unknown block kind: {block.kind}")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Editing session
# ---------------------------------------------------------------------------

class RichTextEditor:
    """Editing session over one document body with undo/redo history.

    on_change receives the new markup after every edit, undo and redo.
    """

    HEADING_LEVELS = (1, 2)

    def __init__(self, content: str = "", on_change: Optional[Callable[[str], None]] = None):
        self._original = content
        self._history: list[RichDocument] = [parse_html(content)]
        self._index = 0
        self._on_change = on_change

    @property
    def document(self) -> RichDocument:
        return self._history[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._history) - 1

    def get_html(self) -> str:
        if self._index == 0:
            return self._original
        return render_html(self.document)

    def text(self, block: int, item: Optional[int] = None) -> str:
        return runs_text(self._runs(self.document, block, item))

    # History

    def _commit(self, document: RichDocument) -> None:
        if document == self.document:
            return
        del self._history[self._index + 1:]
        self._history.append(document)
        self._index += 1
        self._emit()

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.get_html())

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._index -= 1
        self._emit()
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._index += 1
        self._emit()
        return True

    # Addressing

    def _block(self, document: RichDocument, index: int) -> Block:
        if not 0 <= index < len(document.blocks):
            raise ValidationError(f"No block at index {index}", field="block")
        return document.blocks[index]

    def _runs(self, document: RichDocument, index: int, item: Optional[int]) -> tuple[TextRun, ...]:
        block = self._block(document, index)
        if block.kind == BlockKind.HORIZONTAL_RULE:
            raise InvalidStateError("A horizontal rule holds no text")
        if block.is_list:
            if item is None or not 0 <= item < len(block.items):
                raise ValidationError(f"No list item {item} in block {index}", field="item")
            return block.items[item]
        return block.runs

    def _with_runs(self, document: RichDocument, index: int, item: Optional[int], runs) -> RichDocument:
        block = self._block(document, index)
        runs = normalize_runs(runs)
        if block.is_list:
            items = list(block.items)
            items[item] = runs
            block = block.model_copy(update={"items": tuple(items)})
        else:
            block = block.model_copy(update={"runs": runs})
        return self._with_block(document, index, block)

    @staticmethod
    def _with_block(document: RichDocument, index: int, block: Optional[Block], *extra: Block) -> RichDocument:
        blocks = list(document.blocks)
        replacement = ([block] if block is not None else []) + list(extra)
        blocks[index:index + 1] = replacement
        return RichDocument(blocks=tuple(blocks))

    def _checked_range(self, selection: Selection):
        runs = self._runs(self.document, selection.block, selection.item)
        length = len(runs_text(runs))
        if not 0 <= selection.start <= selection.end <= length:
            raise ValidationError(
                f"Selection {selection.start}-{selection.end} outside 0-{length}",
                field="selection",
            )
        return runs

    def _restyle(self, selection: Selection, update: Callable[[list[TextRun]], list[TextRun]]) -> None:
        runs = self._checked_range(selection)
        if selection.start == selection.end:
            return
        before, middle, after = _split_range(runs, selection.start, selection.end)
        document = self._with_runs(
            self.document, selection.block, selection.item, before + update(middle) + after
        )
        self._commit(document)

    # Inline formatting

    def toggle_mark(self, selection: Selection, mark: Mark) -> None:
        """Add mark to the range, or remove it if the whole range has it."""
        attr = Mark(mark).value

        def update(middle: list[TextRun]) -> list[TextRun]:
            value = not all(getattr(run, attr) for run in middle)
            return [run.model_copy(update={attr: value}) for run in middle]

        self._restyle(selection, update)

    def toggle_bold(self, selection: Selection) -> None:
        self.toggle_mark(selection, Mark.BOLD)

    def toggle_italic(self, selection: Selection) -> None:
        self.toggle_mark(selection, Mark.ITALIC)

    def toggle_underline(self, selection: Selection) -> None:
        self.toggle_mark(selection, Mark.UNDERLINE)

    def set_font_family(self, selection: Selection, family: Optional[str]) -> None:
        self._restyle(selection, lambda middle: [
            run.model_copy(update={"font_family": family or None}) for run in middle
        ])

    def set_font_size(self, selection: Selection, size: Optional[str]) -> None:
        """Set or (with None) unset the font size attribute."""
        self._restyle(selection, lambda middle: [
            run.model_copy(update={"font_size": size or None}) for run in middle
        ])

    # Text

    def insert_text(self, block: int, offset: int, text: str, item: Optional[int] = None) -> None:
        """Insert text at offset, inheriting the marks of the preceding character."""
        runs = self._checked_range(Selection(block=block, start=offset, end=offset, item=item))
        if not text:
            return
        before, after = _split_at(runs, offset)
        model = before[-1] if before else (after[0] if after else TextRun(text=""))
        inserted = model.model_copy(update={"text": text})
        self._commit(self._with_runs(self.document, block, item, before + [inserted] + after))

    def delete_text(self, selection: Selection) -> None:
        self._restyle(selection, lambda middle: [])

    # Blocks

    def set_heading(self, block: int, level: int) -> None:
        if level not in self.HEADING_LEVELS:
            raise ValidationError(f"Heading level must be one of {self.HEADING_LEVELS}", field="level")
        current = self._block(self.document, block)
        if current.kind not in (BlockKind.PARAGRAPH, BlockKind.HEADING):
            raise InvalidStateError(f"Cannot make a {current.kind.value} into a heading")
        updated = Block(kind=BlockKind.HEADING, level=level, runs=current.runs)
        self._commit(self._with_block(self.document, block, updated))

    def toggle_heading(self, block: int, level: int) -> None:
        """Turn a paragraph into a heading, or a heading of that level back into a paragraph."""
        current = self._block(self.document, block)
        if current.kind == BlockKind.HEADING and current.level == level:
            self.set_paragraph(block)
            return
        self.set_heading(block, level)

    def set_paragraph(self, block: int) -> None:
        current = self._block(self.document, block)
        if current.kind == BlockKind.HORIZONTAL_RULE:
            raise InvalidStateError("Cannot turn a horizontal rule into a paragraph")
        if current.is_list:
            paragraphs = [Block(kind=BlockKind.PARAGRAPH, runs=item) for item in current.items]
            if not paragraphs:
                paragraphs = [Block(kind=BlockKind.PARAGRAPH)]
            self._commit(self._with_block(self.document, block, paragraphs[0], *paragraphs[1:]))
            return
        self._commit(self._with_block(self.document, block, Block(kind=BlockKind.PARAGRAPH, runs=current.runs)))

    def _toggle_list(self, block: int, kind: BlockKind) -> None:
        current = self._block(self.document, block)
        if current.kind == kind:
            self.set_paragraph(block)
            return
        if current.is_list:
            updated = current.model_copy(update={"kind": kind})
        elif current.kind in (BlockKind.PARAGRAPH, BlockKind.HEADING):
            updated = Block(kind=kind, items=(current.runs,))
        else:
            raise InvalidStateError(f"Cannot make a {current.kind.value} into a list")
        self._commit(self._with_block(self.document, block, updated))

    def toggle_bullet_list(self, block: int) -> None:
        self._toggle_list(block, BlockKind.BULLET_LIST)

    def toggle_ordered_list(self, block: int) -> None:
        self._toggle_list(block, BlockKind.ORDERED_LIST)

    def insert_horizontal_rule(self, after: int) -> None:
        """Insert a rule after block index after (-1 inserts at the top)."""
        self._insert_block(after, Block(kind=BlockKind.HORIZONTAL_RULE))

    def insert_paragraph(self, after: int, text: str = "") -> None:
        runs = (TextRun(text=text),) if text else ()
        self._insert_block(after, Block(kind=BlockKind.PARAGRAPH, runs=runs))

    def _insert_block(self, after: int, new_block: Block) -> None:
        if not -1 <= after < len(self.document.blocks):
            raise ValidationError(f"No block at index {after}", field="block")
        blocks = list(self.document.blocks)
        blocks.insert(after + 1, new_block)
        self._commit(RichDocument(blocks=tuple(blocks)))

    def delete_block(self, block: int) -> None:
        self._block(self.document, block)
        self._commit(self._with_block(self.document, block, None))

    def set_content(self, content: str) -> None:
        """Replace the whole body (counts as one undoable edit)."""
        self._commit(parse_html(content))
