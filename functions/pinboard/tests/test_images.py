import base64
import io
import os
import unittest

from PIL import Image, UnidentifiedImageError

from pinboard import images


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class MediaTypeTests(unittest.TestCase):
    def test_image_types(self):
        for media_type in ("image/png", "image/jpeg", "IMAGE/WEBP", "image/png; q=1"):
            self.assertTrue(images.is_image_media_type(media_type), media_type)

    def test_non_image_types(self):
        for media_type in ("text/plain", "application/pdf", "", None, "imagery"):
            self.assertFalse(images.is_image_media_type(media_type), media_type)

    def test_data_url(self):
        url = images.to_data_url(b"\x89PNG", "image/png")
        prefix = "data:image/png;base64,"
        self.assertTrue(url.startswith(prefix))
        self.assertEqual(base64.b64decode(url[len(prefix):]), b"\x89PNG")


class CompressImageTests(unittest.TestCase):
    def test_small_image_untouched(self):
        data = _encode(Image.new("RGB", (50, 50), (1, 2, 3)), "PNG")
        out, media_type = images.compress_image(data, max_size_mb=1.0)
        self.assertEqual(out, data)
        self.assertEqual(media_type, "image/png")

    def test_large_image_fits_ceiling(self):
        noise = Image.frombytes("RGB", (300, 300), os.urandom(300 * 300 * 3))
        data = _encode(noise, "PNG")
        ceiling_mb = 0.02
        self.assertGreater(len(data), ceiling_mb * 1024 * 1024)

        out, media_type = images.compress_image(data, max_size_mb=ceiling_mb)
        self.assertLessEqual(len(out), ceiling_mb * 1024 * 1024)
        self.assertEqual(media_type, "image/jpeg")
        with Image.open(io.BytesIO(out)) as img:
            self.assertEqual(img.format, "JPEG")

    def test_alpha_channel_is_flattened(self):
        noise = Image.frombytes("RGBA", (200, 200), os.urandom(200 * 200 * 4))
        out, media_type = images.compress_image(_encode(noise, "PNG"), max_size_mb=0.02)
        self.assertEqual(media_type, "image/jpeg")
        with Image.open(io.BytesIO(out)) as img:
            self.assertEqual(img.mode, "RGB")

    def test_not_an_image(self):
        with self.assertRaises(UnidentifiedImageError):
            images.compress_image(b"plain text", max_size_mb=1.0)


class FitModeTests(unittest.TestCase):
    def test_tall_image_fits_by_width(self):
        self.assertEqual(images.fit_mode((800, 1600), (400, 600)), images.FIT_MAX_WIDTH)

    def test_wide_image_fits_by_height(self):
        self.assertEqual(images.fit_mode((1600, 400), (400, 600)), images.FIT_MAX_HEIGHT)

    def test_small_image_fits_by_height(self):
        self.assertEqual(images.fit_mode((100, 100), (400, 600)), images.FIT_MAX_HEIGHT)

    def test_degenerate_image(self):
        self.assertEqual(images.fit_mode((0, 0), (400, 600)), images.FIT_MAX_WIDTH)

    def test_dimensions(self):
        data = _encode(Image.new("RGB", (12, 34)), "PNG")
        self.assertEqual(images.image_dimensions(data), (12, 34))


if __name__ == "__main__":
    unittest.main()
