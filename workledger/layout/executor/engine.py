#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout Engine

Walks a RenderTree and issues draw operations against a canvas:
- One handler per BlockType (closed dispatch table)
- Page-break insertion before every unbreakable unit
- Sequential image embedding with in-place placeholders on failure

An explicit Cursor is threaded through every handler and returned
updated; the engine keeps no per-render state on itself, so one engine
can serve any number of renders (never two on the same canvas at once).

Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, TYPE_CHECKING
import logging
import math

from config.settings import Settings, get_settings
from config.constants import EMPTY_PLACEHOLDER, CHECK_GLYPH
from workledger.contracts import (
    BlockType,
    ImageEmbedError,
    LayoutError,
    RenderBlock,
    RenderMetadata,
    RenderTree,
)
from ..formatting import field_label, format_datetime, format_date, format_value, is_checked
from .cursor import Cursor, PageFrame

if TYPE_CHECKING:
    from ..renderer.base_canvas import BaseCanvas

logger = logging.getLogger(__name__)

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
BRAND_BLUE = (59, 130, 246)
ERROR_RED = (220, 53, 69)
LABEL_GRAY = (80, 80, 80)
MUTED_GRAY = (100, 100, 100)
CAPTION_GRAY = (60, 60, 60)
TIMESTAMP_GRAY = (120, 120, 120)
PLACEHOLDER_GRAY = (150, 150, 150)
BORDER_GRAY = (180, 180, 180)
RULE_GRAY = (200, 200, 200)
HEADER_FILL = (240, 240, 240)


@dataclass(frozen=True)
class LayoutContext:
    """Per-render drawing target and page geometry"""
    canvas: 'BaseCanvas'
    frame: PageFrame


BlockHandler = Callable[[LayoutContext, RenderBlock, Cursor], Awaitable[Cursor]]


class LayoutEngine:
    """
    Lays out render trees.

    Usage:
        engine = LayoutEngine()
        canvas = PdfCanvas(tree.page)
        await engine.render(tree, canvas)
        pdf_bytes = canvas.finalize()
    """

    # Section title band (mm)
    TITLE_FONT_SIZE = 11
    TITLE_RULE_OFFSET = 6
    TITLE_BAND = 11

    # Detail entry
    TWO_COLUMN_ROW = 12
    TWO_COLUMN_GAP = 10
    TWO_COLUMN_MAX_LINES = 2
    LABEL_HEIGHT = 4
    LINE_HEIGHT = 4
    FIELD_GAP = 3

    # Text section
    TEXT_LINE_HEIGHT = 5

    # Checklist
    CHECKLIST_ROW = 6
    CHECKBOX_SIZE = 4
    CHECKLIST_LABEL_OFFSET = 7

    # Table
    TABLE_HEADER_HEIGHT = 7
    TABLE_ROW_HEIGHT = 7

    # Metrics cards
    CARD_HEIGHT = 22
    CARD_GAP = 5
    CARD_COLUMNS = 3

    # Signatures
    SIGNATURE_WIDTH = 60
    SIGNATURE_HEIGHT = 30
    SIGNATURE_PLACEHOLDER = 10
    SIGNATURE_LABEL = 5
    SIGNATURE_DATE = 5
    SIGNATURE_GAP = 5

    # Photo grid
    PHOTO_GAP = 5
    PHOTO_COLUMNS = 2
    PHOTO_RATIO = 0.75
    CAPTION_BAND = 12

    # Between blocks
    BLOCK_GAP = 3

    DEFAULT_TITLES = {
        BlockType.TEXT_SECTION: "Observations",
        BlockType.PHOTO_GRID: "Photo Documentation",
        BlockType.SIGNATURE_BOX: "Signatures",
    }

    def __init__(
        self,
        settings: Optional[Settings] = None,
        report_header: Optional[bool] = None,
    ):
        """
        Initialize layout engine.

        Args:
            settings: Settings (global settings when omitted)
            report_header: Draw the brand/contract banner before the first
                block (settings default)
        """
        self.settings = settings or get_settings()
        self.decimals = self.settings.number_decimals
        self.report_header = (
            self.settings.include_report_header if report_header is None else report_header
        )

        self._handlers: Dict[BlockType, BlockHandler] = {
            BlockType.HEADER: self._layout_header,
            BlockType.DETAIL_ENTRY: self._layout_detail_entry,
            BlockType.TEXT_SECTION: self._layout_text_section,
            BlockType.CHECKLIST: self._layout_checklist,
            BlockType.TABLE: self._layout_table,
            BlockType.METRICS_CARDS: self._layout_metrics_cards,
            BlockType.SIGNATURE_BOX: self._layout_signature_box,
            BlockType.PHOTO_GRID: self._layout_photo_grid,
        }

        missing = [t.value for t in BlockType if t not in self._handlers]
        if missing:
            raise LayoutError(f"No layout handler for block types: {missing}")

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    async def render(self, tree: RenderTree, canvas: 'BaseCanvas', new_page: bool = False) -> None:
        """
        Lay out every block of a tree onto a canvas.

        Args:
            tree: Render tree
            canvas: Drawing target
            new_page: Start on a fresh page (combined reports)

        Raises:
            LayoutError: Malformed tree or unknown block type
        """
        if not isinstance(tree, RenderTree):
            raise LayoutError(f"Expected RenderTree, got {type(tree).__name__}")

        ctx = self.create_context(tree, canvas)

        if new_page:
            canvas.new_page()
        cursor = Cursor.top_of_page(ctx.frame, canvas.page_index)

        if self.report_header:
            cursor = self.layout_report_header(ctx, tree.metadata, cursor)

        for block in tree.blocks:
            logger.debug(f"Laying out block {block.block_id} ({getattr(block.type, 'value', block.type)})")
            cursor = await self.layout_block(ctx, block, cursor)
            cursor = cursor.advance(self.BLOCK_GAP)

        logger.info(
            f"Layout complete: {len(tree.blocks)} blocks, "
            f"pages {ctx.canvas.page_index + 1}"
        )

    def create_context(self, tree: RenderTree, canvas: 'BaseCanvas') -> LayoutContext:
        margins = tree.page.margins
        frame = PageFrame(
            page_width=canvas.page_width,
            page_height=canvas.page_height,
            margin_top=margins.top,
            margin_bottom=margins.bottom,
            margin_left=margins.left,
            margin_right=margins.right,
        )
        return LayoutContext(canvas=canvas, frame=frame)

    async def layout_block(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        """Dispatch one block to its handler; returns the cursor after it"""
        handler = self._handlers.get(block.type) if isinstance(block.type, BlockType) else None
        if handler is None:
            raise LayoutError(f"Unknown block type '{block.type}' in block {block.block_id}")
        return await handler(ctx, block, cursor)

    def check_page_break(self, ctx: LayoutContext, cursor: Cursor, required: float) -> Cursor:
        """
        Move to a new page when `required` mm do not fit below the cursor.

        A cursor already at the top of a page never breaks, so units
        taller than a page are drawn rather than looping.
        """
        if cursor.fits(required, ctx.frame) or cursor.at_top(ctx.frame):
            return cursor
        ctx.canvas.new_page()
        logger.debug(f"Page break before {required:.1f}mm unit -> page {ctx.canvas.page_index + 1}")
        return cursor.next_page(ctx.frame)

    # =========================================================================
    # DRAW HELPERS
    # =========================================================================

    def _text(
        self,
        ctx: LayoutContext,
        text: str,
        x: float,
        y: float,
        size: float,
        bold: bool = False,
        italic: bool = False,
        color=BLACK,
        **kwargs: Any,
    ) -> int:
        ctx.canvas.set_font(size, bold=bold, italic=italic)
        ctx.canvas.set_text_color(color)
        return ctx.canvas.draw_text(text, x, y, **kwargs)

    def _lines(self, ctx: LayoutContext, text: str, width: float, size: float, bold: bool = False) -> List[str]:
        ctx.canvas.set_font(size, bold=bold)
        return ctx.canvas.split_text(text, width)

    def _rule(self, ctx: LayoutContext, y: float) -> None:
        ctx.canvas.set_draw_color(RULE_GRAY)
        ctx.canvas.set_line_width(0.1)
        ctx.canvas.draw_line(ctx.frame.content_left, y, ctx.frame.content_right, y)

    def _title(self, block: RenderBlock) -> Optional[str]:
        return block.option("title", default=self.DEFAULT_TITLES.get(block.type))

    def _section_title(self, ctx: LayoutContext, title: Optional[str], cursor: Cursor, keep_with: float) -> Cursor:
        """Title and rule, kept on the same page as the first unit after it"""
        if not title:
            return cursor
        cursor = self.check_page_break(ctx, cursor, self.TITLE_BAND + keep_with)
        self._text(ctx, str(title), ctx.frame.content_left, cursor.y + 4, self.TITLE_FONT_SIZE, bold=True)
        self._rule(ctx, cursor.y + self.TITLE_RULE_OFFSET)
        return cursor.advance(self.TITLE_BAND)

    @staticmethod
    def _fields(content: Dict[str, Any]) -> List[tuple]:
        return [(k, v) for k, v in content.items() if not str(k).startswith("_")]

    @staticmethod
    def _labels(block: RenderBlock) -> Dict[str, str]:
        labels = dict(block.options.get("labels") or {})
        labels.update(block.content.get("_labels") or {})
        return labels

    @staticmethod
    def _columns(block: RenderBlock, default: int) -> int:
        try:
            columns = int(block.option("columns", default=default))
        except (TypeError, ValueError):
            return default
        return max(columns, 1)

    # =========================================================================
    # REPORT HEADER
    # =========================================================================

    def layout_report_header(self, ctx: LayoutContext, metadata: RenderMetadata, cursor: Cursor) -> Cursor:
        """Brand line, report title, contract and entry summary, rule"""
        frame = ctx.frame
        left = frame.content_left
        contract = metadata.contract or {}

        entry_info = []
        if metadata.entry_date:
            entry_info.append(f"Date: {format_date(metadata.entry_date)}")
        if metadata.shift:
            entry_info.append(f"Shift: {metadata.shift}")

        height = 8 + 7 + 5
        height += 5 if contract.get("number") else 0
        height += 5 if contract.get("client") else 0
        height += 5 if entry_info else 0
        cursor = self.check_page_break(ctx, cursor, height)
        y = cursor.y

        self._text(ctx, self.settings.brand_title, left, y + 5, 16, bold=True, color=BRAND_BLUE)
        self._text(
            ctx, f"Generated: {format_datetime(metadata.generated_at)}",
            frame.content_right, y + 5, 8, color=(128, 128, 128), align="right",
        )
        y += 8

        self._text(ctx, self.settings.report_title, left, y + 5, 14, bold=True)
        y += 7

        if contract.get("number"):
            line = f"Contract: {contract['number']}"
            if contract.get("name"):
                line += f" - {contract['name']}"
            self._text(ctx, line, left, y + 4, 10)
            y += 5

        if contract.get("client"):
            self._text(ctx, f"Client: {contract['client']}", left, y + 4, 9)
            y += 5

        if entry_info:
            self._text(ctx, " | ".join(entry_info), left, y + 4, 9, color=MUTED_GRAY)
            y += 5

        self._rule(ctx, y)
        y += 5

        return Cursor(page=cursor.page, y=y)

    # =========================================================================
    # BLOCK HANDLERS
    # =========================================================================

    async def _layout_header(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        static = block.options.get("content") or {}
        title = block.content.get("title") or static.get("title")
        subtitle = block.content.get("subtitle") or static.get("subtitle")
        if not title and not subtitle:
            return cursor

        height = (7 if title else 0) + (6 if subtitle else 0)
        cursor = self.check_page_break(ctx, cursor, height)
        left = ctx.frame.content_left

        if title:
            self._text(ctx, str(title), left, cursor.y + 5, 12, bold=True)
            cursor = cursor.advance(7)
        if subtitle:
            self._text(ctx, str(subtitle), left, cursor.y + 4, 10, color=MUTED_GRAY)
            cursor = cursor.advance(6)
        return cursor

    async def _layout_detail_entry(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        fields = self._fields(block.content)
        labels = self._labels(block)
        two_column = block.layout in ("two_column", "grid") or block.options.get("columns") == 2

        if two_column:
            return self._detail_two_column(ctx, block, fields, labels, cursor)
        return self._detail_single_column(ctx, block, fields, labels, cursor)

    def _detail_two_column(self, ctx, block, fields, labels, cursor: Cursor) -> Cursor:
        frame = ctx.frame
        column_width = (frame.content_width - self.TWO_COLUMN_GAP) / 2
        right_x = frame.content_left + column_width + self.TWO_COLUMN_GAP

        cursor = self._section_title(ctx, self._title(block), cursor, self.TWO_COLUMN_ROW)

        left_fields = fields[0::2]
        right_fields = fields[1::2]
        for i in range(len(left_fields)):
            cursor = self.check_page_break(ctx, cursor, self.TWO_COLUMN_ROW)
            self._field_cell(ctx, left_fields[i], labels, frame.content_left, cursor.y, column_width)
            if i < len(right_fields):
                self._field_cell(ctx, right_fields[i], labels, right_x, cursor.y, column_width)
            cursor = cursor.advance(self.TWO_COLUMN_ROW)
        return cursor

    def _field_cell(self, ctx, field, labels, x: float, y: float, width: float) -> None:
        key, value = field
        self._text(ctx, field_label(key, labels), x, y + 3, 8, bold=True, color=LABEL_GRAY)

        lines = self._lines(ctx, format_value(value, self.decimals), width - 2, 9)
        for i, line in enumerate(lines[:self.TWO_COLUMN_MAX_LINES]):
            self._text(ctx, line, x, y + 3 + self.LINE_HEIGHT * (i + 1), 9)

    def _detail_single_column(self, ctx, block, fields, labels, cursor: Cursor) -> Cursor:
        frame = ctx.frame
        width = frame.content_width
        usable = frame.bottom_limit - frame.margin_top
        max_lines = max(int((usable - self.LABEL_HEIGHT - self.FIELD_GAP) // self.LINE_HEIGHT), 1)

        first = True
        for key, value in fields:
            lines = self._lines(ctx, format_value(value, self.decimals), width, 9)[:max_lines]
            height = self.LABEL_HEIGHT + len(lines) * self.LINE_HEIGHT + self.FIELD_GAP

            if first:
                cursor = self._section_title(ctx, self._title(block), cursor, height)
                first = False

            cursor = self.check_page_break(ctx, cursor, height)
            y = cursor.y
            self._text(ctx, field_label(key, labels), frame.content_left, y + 3, 8, bold=True, color=LABEL_GRAY)
            for i, line in enumerate(lines):
                self._text(ctx, line, frame.content_left, y + 3 + self.LINE_HEIGHT * (i + 1), 9)
            cursor = cursor.advance(height)

        if first:
            cursor = self._section_title(ctx, self._title(block), cursor, 0)
        return cursor

    async def _layout_text_section(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        text = block.content.get("text")
        if text is None or text == "":
            text = EMPTY_PLACEHOLDER
        lines = self._lines(ctx, str(text), ctx.frame.content_width, 10)

        cursor = self._section_title(ctx, self._title(block), cursor, self.TEXT_LINE_HEIGHT)
        for line in lines:
            cursor = self.check_page_break(ctx, cursor, self.TEXT_LINE_HEIGHT)
            self._text(ctx, line, ctx.frame.content_left, cursor.y + 4, 10)
            cursor = cursor.advance(self.TEXT_LINE_HEIGHT)
        return cursor

    async def _layout_checklist(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        items = block.content.get("items") or []
        if block.option("show_checked_only", default=False):
            items = [item for item in items if is_checked(item.get("status"))]

        frame = ctx.frame
        left = frame.content_left
        box = self.CHECKBOX_SIZE

        cursor = self._section_title(ctx, self._title(block), cursor, self.CHECKLIST_ROW if items else 0)
        for item in items:
            cursor = self.check_page_break(ctx, cursor, self.CHECKLIST_ROW)
            y = cursor.y

            ctx.canvas.set_draw_color(BLACK)
            ctx.canvas.set_line_width(0.3)
            ctx.canvas.draw_rect(left, y + 1, box, box, fill=False, stroke=True)
            if is_checked(item.get("status")):
                self._text(ctx, CHECK_GLYPH, left + box / 2, y + 4.3, 9, align="center")

            task = format_value(item.get("task"), self.decimals)
            self._text(ctx, task, left + self.CHECKLIST_LABEL_OFFSET, y + 4, 9)

            remarks = item.get("remarks")
            if remarks:
                first_line = self._lines(ctx, str(remarks), frame.content_width / 2, 8)[0]
                self._text(ctx, first_line, frame.content_right, y + 4, 8, color=MUTED_GRAY, align="right")

            cursor = cursor.advance(self.CHECKLIST_ROW)
        return cursor

    async def _layout_table(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        fields = self._fields(block.content)
        labels = self._labels(block)
        if not fields:
            return self._section_title(ctx, self._title(block), cursor, 0)

        frame = ctx.frame
        left = frame.content_left
        table_width = frame.content_width
        column_width = table_width / len(fields)
        height = self.TABLE_HEADER_HEIGHT + self.TABLE_ROW_HEIGHT

        cursor = self._section_title(ctx, self._title(block), cursor, height)
        cursor = self.check_page_break(ctx, cursor, height)
        y = cursor.y

        # Header row
        ctx.canvas.set_fill_color(HEADER_FILL)
        ctx.canvas.draw_rect(left, y, table_width, self.TABLE_HEADER_HEIGHT, fill=True, stroke=False)
        for i, (key, _) in enumerate(fields):
            label = self._lines(ctx, field_label(key, labels), column_width - 4, 8, bold=True)[0]
            self._text(ctx, label, left + i * column_width + 2, y + 5, 8, bold=True)
        y += self.TABLE_HEADER_HEIGHT

        # Data row
        ctx.canvas.set_draw_color(RULE_GRAY)
        ctx.canvas.set_line_width(0.2)
        for i, (_, value) in enumerate(fields):
            x = left + i * column_width
            text = self._lines(ctx, format_value(value, self.decimals), column_width - 4, 8)[0]
            self._text(ctx, text, x + 2, y + 5, 8)
            ctx.canvas.draw_rect(x, y, column_width, self.TABLE_ROW_HEIGHT, fill=False, stroke=True)

        return cursor.advance(height)

    async def _layout_metrics_cards(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        metrics = block.content.get("metrics") or []
        columns = self._columns(block, self.CARD_COLUMNS)

        frame = ctx.frame
        card_width = (frame.content_width - self.CARD_GAP * (columns - 1)) / columns

        cursor = self._section_title(ctx, self._title(block), cursor, self.CARD_HEIGHT if metrics else 0)
        for start in range(0, len(metrics), columns):
            row = metrics[start:start + columns]
            cursor = self.check_page_break(ctx, cursor, self.CARD_HEIGHT)
            y = cursor.y

            for i, metric in enumerate(row):
                x = frame.content_left + i * (card_width + self.CARD_GAP)
                center = x + card_width / 2

                ctx.canvas.set_fill_color(BRAND_BLUE)
                ctx.canvas.draw_rect(x, y, card_width, self.CARD_HEIGHT, fill=True, stroke=False)

                value = format_value(metric.get("value"), self.decimals)
                if metric.get("unit") and value != EMPTY_PLACEHOLDER:
                    value = f"{value} {metric['unit']}"
                self._text(ctx, value, center, y + 10, 16, bold=True, color=WHITE, align="center")

                label_lines = self._lines(ctx, str(metric.get("label") or ""), card_width - 4, 7)[:2]
                for j, line in enumerate(label_lines):
                    self._text(ctx, line, center, y + 16 + j * 3, 7, color=WHITE, align="center")

            cursor = cursor.advance(self.CARD_HEIGHT + self.CARD_GAP)
        return cursor

    def _signature_height(self, signature: Dict[str, Any]) -> float:
        height = self.SIGNATURE_HEIGHT + 3 + self.SIGNATURE_GAP
        if signature.get("name") or signature.get("role"):
            height += self.SIGNATURE_LABEL
        if signature.get("date"):
            height += self.SIGNATURE_DATE
        return height

    async def _layout_signature_box(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        signatures = block.content.get("signatures") or []
        left = ctx.frame.content_left

        if not signatures:
            cursor = self._section_title(ctx, self._title(block), cursor, self.SIGNATURE_PLACEHOLDER)
            cursor = self.check_page_break(ctx, cursor, self.SIGNATURE_PLACEHOLDER)
            self._text(ctx, "Not signed yet", left, cursor.y + 4, 9, italic=True, color=PLACEHOLDER_GRAY)
            return cursor.advance(self.SIGNATURE_PLACEHOLDER)

        cursor = self._section_title(ctx, self._title(block), cursor, self._signature_height(signatures[0]))

        for signature in signatures:
            cursor = self.check_page_break(ctx, cursor, self._signature_height(signature))
            y = cursor.y

            name, role = signature.get("name"), signature.get("role")
            if name or role:
                label = f"{name} ({role})" if name and role else (name or role)
                self._text(ctx, str(label), left, y + 4, 9, bold=True, color=LABEL_GRAY)
                y += self.SIGNATURE_LABEL

            w, h = self.SIGNATURE_WIDTH, self.SIGNATURE_HEIGHT
            url = signature.get("url")
            if url:
                try:
                    await ctx.canvas.draw_image(url, left, y, w, h, fit="fill")
                except ImageEmbedError as e:
                    logger.warning(f"Signature image failed to load: {e.source} ({e.reason})")
                    self._text(ctx, "Failed to load", left + w / 2, y + h / 2, 7, color=ERROR_RED, align="center")
            else:
                self._text(ctx, "Not signed", left + w / 2, y + h / 2, 8, color=BORDER_GRAY, align="center")

            ctx.canvas.set_draw_color(BORDER_GRAY)
            ctx.canvas.set_line_width(0.5)
            ctx.canvas.draw_rect(left, y, w, h, fill=False, stroke=True)
            y += h + 3

            if signature.get("date"):
                self._text(
                    ctx, f"Signed: {format_datetime(signature['date'])}",
                    left, y + 3, 7, color=MUTED_GRAY,
                )
                y += self.SIGNATURE_DATE

            y += self.SIGNATURE_GAP
            cursor = Cursor(page=cursor.page, y=y)

        return cursor

    async def _layout_photo_grid(self, ctx: LayoutContext, block: RenderBlock, cursor: Cursor) -> Cursor:
        photos = block.content.get("photos") or []
        usable = [p for p in photos if p.get("url")]
        if len(usable) < len(photos):
            logger.warning(f"Block {block.block_id}: skipped {len(photos) - len(usable)} photos without URL")
        if not usable:
            return cursor

        frame = ctx.frame
        columns = self._columns(block, self.PHOTO_COLUMNS)
        photo_width = (frame.content_width - self.PHOTO_GAP * (columns - 1)) / columns
        photo_height = photo_width * self.PHOTO_RATIO
        row_height = photo_height + self.CAPTION_BAND

        show_captions = block.option("show_captions", default=True) is not False
        show_timestamps = block.option("show_timestamps", default=True) is not False

        cursor = self._section_title(ctx, self._title(block), cursor, row_height)

        rows = math.ceil(len(usable) / columns)
        for r in range(rows):
            row = usable[r * columns:(r + 1) * columns]
            # Whole row moves to the next page, never a single photo
            cursor = self.check_page_break(ctx, cursor, row_height)
            y = cursor.y

            for i, photo in enumerate(row):
                x = frame.content_left + i * (photo_width + self.PHOTO_GAP)
                await self._photo_cell(ctx, photo, x, y, photo_width, photo_height, show_captions, show_timestamps)

            cursor = cursor.advance(row_height)
        return cursor

    async def _photo_cell(self, ctx, photo, x, y, w, h, show_captions: bool, show_timestamps: bool) -> None:
        try:
            await ctx.canvas.draw_image(photo["url"], x, y, w, h, fit="contain")
        except ImageEmbedError as e:
            logger.warning(f"Photo failed to load: {e.source} ({e.reason})")
            ctx.canvas.set_fill_color(HEADER_FILL)
            ctx.canvas.set_draw_color(RULE_GRAY)
            ctx.canvas.set_line_width(0.2)
            ctx.canvas.draw_rect(x, y, w, h, fill=True, stroke=True)
            self._text(ctx, "Image unavailable", x + w / 2, y + h / 2, 8, italic=True,
                       color=PLACEHOLDER_GRAY, align="center")

        center = x + w / 2
        caption = photo.get("caption") if show_captions else None
        if caption:
            first_line = self._lines(ctx, str(caption), w, 7, bold=True)[0]
            self._text(ctx, first_line, center, y + h + 4, 7, bold=True, color=CAPTION_GRAY, align="center")

        timestamp = photo.get("timestamp") if show_timestamps else None
        if timestamp:
            self._text(
                ctx, format_datetime(timestamp), center, y + h + (8 if caption else 4), 6,
                color=TIMESTAMP_GRAY, align="center",
            )
