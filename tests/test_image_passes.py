"""Image aspect-fix and image-embedding tests."""

import base64
import io
import tempfile
import unittest
from pathlib import Path

from lxml import etree
from PIL import Image

from svgdeck.finalize.embed_images import embed_images, mime_type_for, resolve_image_path
from svgdeck.finalize.fix_image_aspect import fix_image_aspect, image_size_from_data_uri

SVG_NS = "http://www.w3.org/2000/svg"


def _png_bytes(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def _data_uri(width: int, height: int) -> str:
    return "data:image/png;base64," + base64.b64encode(_png_bytes(width, height)).decode("ascii")


def _image_svg(href: str, width: str = "400", height: str = "100") -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
        f'<image x="0" y="0" width="{width}" height="{height}" xlink:href="{href}"/>'
        "</svg>"
    )


def _image(svg: str):
    return etree.fromstring(svg.encode("utf-8")).find(f"{{{SVG_NS}}}image")


class TestFixImageAspect(unittest.TestCase):
    def test_image_size_from_data_uri(self) -> None:
        self.assertEqual(image_size_from_data_uri(_data_uri(30, 20)), (30, 20))
        self.assertIsNone(image_size_from_data_uri("data:image/png;base64,AAAA"))
        self.assertIsNone(image_size_from_data_uri("images/a.png"))

    def test_square_image_in_wide_box_is_centred(self) -> None:
        out = fix_image_aspect(_image_svg(_data_uri(50, 50)))
        image = _image(out)
        self.assertEqual(image.get("width"), "100")
        self.assertEqual(image.get("height"), "100")
        self.assertEqual(image.get("x"), "150")
        self.assertEqual(image.get("y"), "0")

    def test_wide_image_in_tall_box_is_centred(self) -> None:
        out = fix_image_aspect(_image_svg(_data_uri(40, 20), width="100", height="200"))
        image = _image(out)
        self.assertEqual(image.get("width"), "100")
        self.assertEqual(image.get("height"), "50")
        self.assertEqual(image.get("y"), "75")

    def test_is_idempotent(self) -> None:
        once = fix_image_aspect(_image_svg(_data_uri(30, 20), width="333", height="100"))
        self.assertEqual(fix_image_aspect(once), once)

    def test_matching_ratio_is_untouched(self) -> None:
        svg = _image_svg(_data_uri(40, 10))
        self.assertIs(fix_image_aspect(svg), svg)

    def test_external_reference_is_untouched(self) -> None:
        svg = _image_svg("images/photo.png")
        self.assertEqual(fix_image_aspect(svg), svg)

    def test_non_positive_box_is_untouched(self) -> None:
        svg = _image_svg(_data_uri(50, 50), width="0")
        self.assertEqual(fix_image_aspect(svg), svg)


class TestEmbedImages(unittest.TestCase):
    def test_relative_file_becomes_data_uri(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            base = Path(temp_dir)
            (base / "images").mkdir()
            (base / "images" / "logo.png").write_bytes(_png_bytes(4, 4))
            out = embed_images(_image_svg("images/logo.png"), base)

        href = _image(out).get("{http://www.w3.org/1999/xlink}href")
        self.assertTrue(href.startswith("data:image/png;base64,"))
        self.assertEqual(image_size_from_data_uri(href), (4, 4))

    def test_plain_href_attribute_is_embedded(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "pic.jpg"
            path.write_bytes(b"not really a jpeg")
            svg = f'<svg xmlns="http://www.w3.org/2000/svg"><image href="{path}"/></svg>'
            out = embed_images(svg, "/nonexistent")
        self.assertIn('href="data:image/jpeg;base64,', out)

    def test_data_uri_is_left_alone(self) -> None:
        svg = _image_svg(_data_uri(2, 2))
        self.assertIs(embed_images(svg, "."), svg)

    def test_urls_are_left_alone(self) -> None:
        svg = _image_svg("https://example.com/a.png")
        self.assertEqual(embed_images(svg, "."), svg)

    def test_missing_file_keeps_reference_and_warns(self) -> None:
        svg = _image_svg("images/missing.png")
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertLogs("svgdeck.finalize.embed_images", level="WARNING"):
                out = embed_images(svg, temp_dir)
        self.assertEqual(out, svg)

    def test_mime_type_for(self) -> None:
        self.assertEqual(mime_type_for("a.PNG"), "image/png")
        self.assertEqual(mime_type_for("a.jpeg"), "image/jpeg")
        self.assertEqual(mime_type_for("a.svg"), "image/svg+xml")
        self.assertEqual(mime_type_for("a.bmp"), "application/octet-stream")

    def test_resolve_image_path(self) -> None:
        base = Path("/project")
        self.assertEqual(resolve_image_path("img/a.png", base), base / "img" / "a.png")
        self.assertIsNone(resolve_image_path("file:///tmp/a.png", base))
        self.assertIsNone(resolve_image_path("#sprite", base))


if __name__ == "__main__":
    unittest.main()
