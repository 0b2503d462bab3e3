"""Shared fixtures: on-disk gallery images and settings pointing at them."""

from __future__ import annotations

import struct
import zlib
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from pawpredict.config import DEFAULT_GALLERY, Settings


def write_image(path: Path, size: tuple[int, int] = (48, 32), mode: str = "RGB") -> Path:
    color: tuple[int, ...] = (200, 120, 40) if mode == "RGB" else (200, 120, 40, 128)
    Image.new(mode, size, color).save(path)
    return path


@pytest.fixture()
def gallery_dir(tmp_path: Path) -> Path:
    """A directory holding a JPEG for every default gallery identifier."""
    directory = tmp_path / "gallery"
    directory.mkdir()
    for image_id in DEFAULT_GALLERY:
        write_image(directory / f"{image_id}.jpg")
    return directory


@pytest.fixture()
def settings(tmp_path: Path, gallery_dir: Path) -> Settings:
    return Settings(
        gallery_dir=str(gallery_dir),
        models_dir=str(tmp_path / "models"),
        model_ttl=300,
    )


@pytest.fixture()
def make_image() -> Callable[..., Path]:
    """Factory writing a solid-colour image file."""
    return write_image


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


def write_header_only_png(path: Path, width: int, height: int) -> Path:
    """Write a PNG that declares ``width`` x ``height`` but carries no pixel data."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", ihdr) + _png_chunk(b"IDAT", b"") + _png_chunk(b"IEND", b"")
    )
    return path


@pytest.fixture()
def make_huge_png() -> Callable[..., Path]:
    """Factory for a 20000x20000 PNG header, past Pillow's decompression bomb limit."""

    def _make(path: Path, width: int = 20_000, height: int = 20_000) -> Path:
        return write_header_only_png(path, width, height)

    return _make
