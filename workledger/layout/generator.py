#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Report Generator

End-to-end entry point: (schema, record) -> render tree -> laid out
canvas -> PDF bytes or an HTML document.

Version: 1.0.0
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import asyncio
import logging

import httpx

from config.constants import SUPPORTED_OUTPUT_FORMATS
from config.settings import Settings, get_settings
from workledger.contracts import BusinessRecord, LayoutSchema, PageConfig, RenderTree
from .builder import RenderTreeBuilder
from .executor import LayoutEngine
from .renderer import BaseCanvas, HtmlCanvas, ImageLoader, PdfCanvas

logger = logging.getLogger(__name__)

SchemaInput = Union[LayoutSchema, Mapping[str, Any]]
RecordInput = Union[BusinessRecord, Mapping[str, Any]]


class ReportGenerator:
    """
    Generates reports.

    Usage:
        generator = ReportGenerator()
        pdf_bytes = generator.generate_bytes(schema, record)
        generator.generate(schema, record, "out/report.html", output_format="html")

        # Inside an event loop
        pdf_bytes = await generator.generate_bytes_async(schema, record)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[LayoutEngine] = None,
        builder: Optional[RenderTreeBuilder] = None,
        inline_html_images: bool = False,
    ):
        """
        Args:
            settings: Settings (global settings when omitted)
            engine: Layout engine to reuse
            builder: Render tree builder to reuse
            inline_html_images: Fetch images and embed them as data URIs in
                HTML output instead of referencing their URLs
        """
        self.settings = settings or get_settings()
        self.engine = engine or LayoutEngine(self.settings)
        self.builder = builder or RenderTreeBuilder(self.settings)
        self.inline_html_images = inline_html_images

    # =========================================================================
    # CANVAS
    # =========================================================================

    @staticmethod
    def resolve_format(output_format: Optional[str], output_path: Optional[Union[str, Path]] = None) -> str:
        """Explicit format, else the output file suffix, else pdf"""
        fmt = output_format
        if not fmt and output_path is not None:
            fmt = Path(output_path).suffix.lstrip(".")
        fmt = (fmt or "pdf").lower()
        if fmt not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format '{fmt}'. Use one of: {SUPPORTED_OUTPUT_FORMATS}")
        return fmt

    def create_canvas(self, page: PageConfig, output_format: str, image_loader: ImageLoader) -> BaseCanvas:
        page_numbers = self.settings.include_page_numbers
        title = self.settings.report_title

        if output_format == "pdf":
            return PdfCanvas(page, image_loader=image_loader, page_numbers=page_numbers, title=title)
        if output_format == "html":
            loader = image_loader if self.inline_html_images else None
            return HtmlCanvas(page, image_loader=loader, page_numbers=page_numbers, title=title)
        raise ValueError(f"Unsupported output format '{output_format}'")

    def _image_loader(self, client: httpx.AsyncClient) -> ImageLoader:
        return ImageLoader(
            client=client,
            timeout=self.settings.image_timeout_seconds,
            max_bytes=self.settings.image_max_bytes,
        )

    # =========================================================================
    # SINGLE RECORD
    # =========================================================================

    def build_tree(
        self,
        schema: SchemaInput,
        record: RecordInput,
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        generated_at: Optional[str] = None,
    ) -> RenderTree:
        return self.builder.build(schema, record, binding_overrides=binding_overrides, generated_at=generated_at)

    async def generate_bytes_async(
        self,
        schema: SchemaInput,
        record: RecordInput,
        output_format: str = "pdf",
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        generated_at: Optional[str] = None,
    ) -> Union[bytes, str]:
        """
        Render one record.

        Returns:
            PDF bytes, or the HTML document as a string

        Raises:
            SchemaValidationError: Raw schema is invalid
            LayoutError: Render tree cannot be laid out
            ValueError: Unsupported output format
        """
        fmt = self.resolve_format(output_format)
        tree = self.build_tree(schema, record, binding_overrides, generated_at)
        logger.debug(f"Render tree: {summarize(tree)}")

        async with httpx.AsyncClient(timeout=self.settings.image_timeout_seconds) as client:
            canvas = self.create_canvas(tree.page, fmt, self._image_loader(client))
            await self.engine.render(tree, canvas)

        output = canvas.finalize()
        logger.info(f"Report generated: entry {tree.metadata.entry_id or '-'} -> {fmt}, {canvas.page_count} pages")
        return output

    def generate_bytes(
        self,
        schema: SchemaInput,
        record: RecordInput,
        output_format: str = "pdf",
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        generated_at: Optional[str] = None,
    ) -> Union[bytes, str]:
        """Synchronous wrapper around generate_bytes_async()"""
        return asyncio.run(
            self.generate_bytes_async(schema, record, output_format, binding_overrides, generated_at)
        )

    async def generate_async(
        self,
        schema: SchemaInput,
        record: RecordInput,
        output_path: Union[str, Path],
        output_format: Optional[str] = None,
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> Path:
        """Render one record to a file; returns the written path"""
        fmt = self.resolve_format(output_format, output_path)
        output = await self.generate_bytes_async(schema, record, fmt, binding_overrides)
        return self._write(output_path, output)

    def generate(
        self,
        schema: SchemaInput,
        record: RecordInput,
        output_path: Union[str, Path],
        output_format: Optional[str] = None,
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> Path:
        return asyncio.run(self.generate_async(schema, record, output_path, output_format, binding_overrides))

    # =========================================================================
    # COMBINED
    # =========================================================================

    async def generate_combined_async(
        self,
        schema: SchemaInput,
        records: Sequence[RecordInput],
        output_format: str = "pdf",
    ) -> Union[bytes, str]:
        """
        Render several records into one document, each starting on a new
        page. Page setup comes from the schema, so it is shared.

        Raises:
            ValueError: No records, or unsupported output format
        """
        if not records:
            raise ValueError("Combined report needs at least one record")

        fmt = self.resolve_format(output_format)
        if not isinstance(schema, LayoutSchema):
            schema = LayoutSchema.from_dict(dict(schema), page_defaults=self.settings.page_defaults())

        trees: List[RenderTree] = [self.build_tree(schema, record) for record in records]

        async with httpx.AsyncClient(timeout=self.settings.image_timeout_seconds) as client:
            canvas = self.create_canvas(schema.page, fmt, self._image_loader(client))
            for i, tree in enumerate(trees):
                await self.engine.render(tree, canvas, new_page=i > 0)

        output = canvas.finalize()
        logger.info(f"Combined report generated: {len(trees)} entries -> {fmt}, {canvas.page_count} pages")
        return output

    def generate_combined(
        self,
        schema: SchemaInput,
        records: Sequence[RecordInput],
        output_path: Optional[Union[str, Path]] = None,
        output_format: Optional[str] = None,
    ) -> Union[bytes, str, Path]:
        """
        Synchronous combined report. Writes to `output_path` and returns
        it when given, otherwise returns the document itself.
        """
        fmt = self.resolve_format(output_format, output_path)
        output = asyncio.run(self.generate_combined_async(schema, records, fmt))
        if output_path is None:
            return output
        return self._write(output_path, output)

    # =========================================================================
    # OUTPUT
    # =========================================================================

    @staticmethod
    def _write(output_path: Union[str, Path], output: Union[bytes, str]) -> Path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(output, bytes):
            path.write_bytes(output)
        else:
            path.write_text(output, encoding="utf-8")
        logger.info(f"Report saved: {path}")
        return path

    def default_output_path(self, record: RecordInput, output_format: str = "pdf") -> Path:
        """<output_dir>/report_<entry id>.<format>"""
        if isinstance(record, BusinessRecord):
            entry_id = record.id
        else:
            entry_id = dict(record).get("id")
        return Path(self.settings.output_dir) / f"report_{entry_id or 'entry'}.{self.resolve_format(output_format)}"


def summarize(tree: RenderTree) -> Dict[str, Any]:
    """Block count per type, for logging and diagnostics"""
    counts: Dict[str, int] = {}
    for block in tree.blocks:
        counts[block.type.value] = counts.get(block.type.value, 0) + 1
    return {"entry_id": tree.metadata.entry_id, "blocks": len(tree.blocks), "by_type": counts}
