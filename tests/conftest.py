import fitz
import pytest


def make_png(width: int = 90, height: int = 127) -> bytes:
    """White RGB image encoded as PNG."""
    pixmap = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pixmap.clear_with(255)
    return pixmap.tobytes("png")


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def raster_pdf(tmp_path, png_bytes):
    """Two-page A4 PDF holding only images, like a plain screenshot export."""
    path = tmp_path / "cv-en-d.pdf"
    doc = fitz.open()
    for _ in range(2):
        page = doc.new_page(width=595.28, height=841.89)
        page.insert_image(page.rect, stream=png_bytes)
    doc.save(path)
    doc.close()
    return path
