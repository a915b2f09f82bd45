#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Image loading for canvases.

Sources:
- http(s) URLs, fetched with httpx
- data: URIs (base64)
- local file paths

Every failure (network, size limit, decode) surfaces as ImageEmbedError
so the layout engine can draw a placeholder and carry on.
"""

from io import BytesIO
from pathlib import Path
from typing import Dict, Optional
import base64
import binascii
import logging

import httpx
from PIL import Image

from config.settings import get_settings
from workledger.contracts import ImageEmbedError

logger = logging.getLogger(__name__)


class ImageLoader:
    """
    Fetches and decodes images, one at a time.

    Decoded images are cached per source for the loader's lifetime, so a
    signature repeated across combined reports is fetched once.

    Usage:
        async with httpx.AsyncClient() as client:
            loader = ImageLoader(client=client)
            image = await loader.load("https://.../photo.jpg")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        max_bytes: Optional[int] = None,
    ):
        """
        Args:
            client: Shared AsyncClient; a short-lived one is opened per
                fetch when omitted
            timeout: Fetch timeout in seconds (settings default)
            max_bytes: Largest accepted payload (settings default)
        """
        settings = get_settings()
        self.client = client
        self.timeout = timeout if timeout is not None else settings.image_timeout_seconds
        self.max_bytes = max_bytes if max_bytes is not None else settings.image_max_bytes
        self._cache: Dict[str, Image.Image] = {}

    async def load(self, source: str) -> Image.Image:
        """
        Fetch and decode an image.

        Raises:
            ImageEmbedError: On any fetch or decode failure
        """
        if not source:
            raise ImageEmbedError(str(source), "no image source")

        if source in self._cache:
            return self._cache[source]

        data = await self.fetch(source)
        image = self.decode(source, data)
        self._cache[source] = image
        return image

    async def fetch(self, source: str) -> bytes:
        """Raw bytes for a source"""
        if source.startswith("data:"):
            data = self._read_data_uri(source)
        elif source.startswith(("http://", "https://")):
            data = await self._download(source)
        else:
            data = self._read_file(source)

        if len(data) > self.max_bytes:
            raise ImageEmbedError(source, f"image is {len(data)} bytes, limit is {self.max_bytes}")
        return data

    async def _download(self, url: str) -> bytes:
        logger.debug(f"Fetching image: {url}")
        try:
            if self.client is not None:
                response = await self.client.get(url, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ImageEmbedError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ImageEmbedError(url, f"{type(e).__name__}: {e}") from e
        return response.content

    def _read_data_uri(self, source: str) -> bytes:
        header, _, payload = source.partition(",")
        if ";base64" not in header:
            raise ImageEmbedError(source[:40], "only base64 data URIs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageEmbedError(source[:40], f"bad base64 payload: {e}") from e

    def _read_file(self, source: str) -> bytes:
        path = Path(source)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageEmbedError(source, f"cannot read file: {e}") from e

    def decode(self, source: str, data: bytes) -> Image.Image:
        """Decode bytes with Pillow"""
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageEmbedError(source, f"cannot decode image: {e}") from e

        if image.mode not in ("RGB", "RGBA", "L"):
            image = image.convert("RGBA")
        return image
