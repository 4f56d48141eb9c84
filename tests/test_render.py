# tests/test_render.py
"""
Tests for qrtransfer.render.
"""

import base64
import io
import random

import pytest
from PIL import Image

from qrtransfer.protocol.chunking import compress_and_chunk, encode_chunk_to_wire
from qrtransfer.render import render_chunk_png

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestRenderChunkPng:
    """Tests for render_chunk_png."""

    def test_renders_chunk(self):
        chunk = compress_and_chunk({"notes": []})[0]

        png = render_chunk_png(chunk)

        assert png.startswith(PNG_SIGNATURE)

    def test_renders_wire_text(self):
        chunk = compress_and_chunk({"notes": []})[0]

        png = render_chunk_png(encode_chunk_to_wire(chunk), box_size=2, border=1)

        width, height = Image.open(io.BytesIO(png)).size
        assert width == height

    def test_full_size_chunk_fits_at_level_h(self):
        """A max-size chunk plus envelope fits in one QR symbol."""
        rng = random.Random(3)
        blob = base64.b64encode(bytes(rng.getrandbits(8) for _ in range(2000))).decode("ascii")
        chunks = compress_and_chunk({"blob": blob})
        assert len(chunks[0].data) == 1200

        png = render_chunk_png(chunks[0], error_correction="H", box_size=1)

        assert png.startswith(PNG_SIGNATURE)

    def test_unknown_error_correction(self):
        chunk = compress_and_chunk({})[0]
        with pytest.raises(ValueError):
            render_chunk_png(chunk, error_correction="X")
