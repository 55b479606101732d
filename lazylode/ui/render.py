"""Rich renderables for pane contents."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from lazylode.core.types import VimMode
from lazylode.navigation.boxes import Box

CURSOR_STYLE = "reverse"
SELECTION_STYLE = "on blue"


def render_text_box(box: Box, focused: bool) -> Text:
    editor = box.editor
    text = Text(editor.text or "")
    sel = editor.selection()
    if sel is not None and editor.text:
        text.stylize(SELECTION_STYLE, sel[0], sel[1] + 1)
    if focused:
        cursor = editor.cursor
        if cursor < len(editor.text) and editor.text[cursor] != "\n":
            text.stylize(CURSOR_STYLE, cursor, cursor + 1)
        else:
            text = text[:cursor] + Text(" ", style=CURSOR_STYLE) + text[cursor:]
    if editor.mode is VimMode.COMMAND:
        text.append(f"\n:{editor.command_buffer}")
    return text


def render_table_box(box: Box, focused: bool) -> RenderableType:
    grid = box.grid
    if grid is None or not grid.columns:
        return Text("No results", style="dim")
    table = Table(title=f"{grid.table} (page {grid.page + 1})" if grid.table else None, expand=True)
    for column in grid.columns:
        table.add_column(column)
    for row_index, row in enumerate(grid.rows):
        cells = []
        for col_index, value in enumerate(row):
            cell = Text("NULL" if value is None else str(value))
            if row_index == grid.row and col_index == grid.col:
                if box.editing_cell:
                    cell = Text(box.editor.text, style="underline")
                if focused:
                    cell.stylize(CURSOR_STYLE)
            cells.append(cell)
        table.add_row(*cells, style="bold" if row_index == grid.row else None)
    return table


def render_items_box(box: Box, focused: bool) -> RenderableType:
    items = box.items
    if items is None or not items.items:
        return Text("(empty)", style="dim")
    lines = []
    for index, item in enumerate(items.items):
        line = Text(item)
        if index == items.index:
            line.stylize(CURSOR_STYLE if focused else "bold")
        lines.append(line)
    return Group(*lines)


def render_box(box: Box, focused: bool) -> RenderableType:
    if box.is_text:
        return render_text_box(box, focused)
    if box.grid is not None:
        return render_table_box(box, focused)
    return render_items_box(box, focused)
