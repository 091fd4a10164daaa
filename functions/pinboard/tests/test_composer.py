import io
import unittest
from unittest.mock import AsyncMock

from PIL import Image

from pinboard.composer import FormState, PinComposer
from pinboard.db import InMemoryDbClient
from pinboard.gateway import PinGateway
from pinboard.images import FIT_MAX_HEIGHT, FIT_MAX_WIDTH
from pinboard.storage import InMemoryStorageClient
from shared.types import ErrorKind


def _jpeg_bytes(size=(24, 48)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (255, 200, 0)).save(buf, format="JPEG")
    return buf.getvalue()


class PinComposerTests(unittest.TestCase):
    def test_defaults(self):
        composer = PinComposer()
        self.assertEqual(composer.tags, ["Default", "Pin"])
        self.assertTrue(composer.upload_label_visible)
        self.assertFalse(composer.preview_visible)
        self.assertEqual(composer.draft()["pin_size"], "medium")
        self.assertEqual(composer.draft()["board"], "default")

    def test_add_tag_appends_in_order(self):
        composer = PinComposer(tags=[])
        composer.add_tag("nature")
        composer.add_tag("travel")
        self.assertEqual(composer.tags, ["nature", "travel"])
        self.assertEqual(composer.draft()["tags"], ["nature", "travel"])

    def test_add_tag_trims_and_skips_blank(self):
        composer = PinComposer(tags=[])
        self.assertFalse(composer.add_tag("   "))
        self.assertTrue(composer.add_tag("  city "))
        composer.add_tag("city")
        self.assertEqual(composer.tags, ["city", "city"])

    def test_submit_tag_input_clears_field(self):
        composer = PinComposer()
        composer.update_field("tag_input", "ocean")
        self.assertTrue(composer.submit_tag_input())
        self.assertEqual(composer.form.tag_input, "")
        self.assertEqual(composer.tags[-1], "ocean")

    def test_remove_tag(self):
        composer = PinComposer(tags=["a", "b", "c"])
        composer.remove_tag(1)
        self.assertEqual(composer.tags, ["a", "c"])

    def test_update_unknown_field(self):
        with self.assertRaises(ValueError):
            PinComposer().update_field("img_url", "x")

    def test_attach_text_file_is_ignored(self):
        composer = PinComposer()
        self.assertFalse(composer.attach_image(b"hello", "text/plain", "notes.txt"))
        self.assertIsNone(composer.image)
        self.assertEqual(composer.draft()["img_url"], "")
        self.assertFalse(composer.preview_visible)
        self.assertTrue(composer.upload_label_visible)

    def test_attach_image_shows_preview(self):
        data = _jpeg_bytes()
        composer = PinComposer()
        self.assertTrue(composer.attach_image(data, "image/jpeg", "sun.jpg"))
        self.assertEqual(composer.image, data)
        self.assertTrue(composer.preview_url.startswith("data:image/jpeg;base64,"))
        self.assertTrue(composer.preview_visible)
        self.assertFalse(composer.upload_label_visible)

    def test_preview_fit_follows_image_shape(self):
        container = (400, 600)
        composer = PinComposer()
        self.assertEqual(composer.preview_fit(container), FIT_MAX_WIDTH)

        composer.attach_image(_jpeg_bytes((800, 1600)), "image/jpeg")
        self.assertEqual(composer.image_size, (800, 1600))
        self.assertEqual(composer.preview_fit(container), FIT_MAX_WIDTH)

        composer.attach_image(_jpeg_bytes((1600, 400)), "image/jpeg")
        self.assertEqual(composer.preview_fit(container), FIT_MAX_HEIGHT)

    def test_unmeasurable_image_fits_by_width(self):
        composer = PinComposer()
        self.assertTrue(composer.attach_image(b"not pixels", "image/png"))
        self.assertIsNone(composer.image_size)
        self.assertEqual(composer.preview_fit((400, 600)), FIT_MAX_WIDTH)

    def test_unknown_size_falls_back_to_medium(self):
        composer = PinComposer()
        composer.update_field("pin_size", "huge")
        self.assertEqual(composer.draft()["pin_size"], "medium")


class PinComposerSubmitTests(unittest.IsolatedAsyncioTestCase):
    async def test_submit_creates_pin_from_form(self):
        db = InMemoryDbClient()
        gateway = PinGateway(db, InMemoryStorageClient())
        composer = PinComposer(author="tester", tags=[])
        composer.add_tag("nature")
        composer.attach_image(_jpeg_bytes(), "image/jpeg")

        form = FormState(
            title="Beach", description="Sand", destination="https://x.test", pin_size=""
        )
        result = await composer.submit(gateway, form)
        self.assertTrue(result.ok)
        self.assertFalse(composer.saving)

        stored = db.pins[result.value.id]
        self.assertEqual(stored["title"], "Beach")
        self.assertEqual(stored["author"], "tester")
        self.assertEqual(stored["pin_size"], "medium")
        self.assertEqual(stored["tags"], ["nature"])
        self.assertFalse(stored["img_url"].startswith("data:"))

    async def test_submit_without_image(self):
        gateway = AsyncMock()
        result = await PinComposer().submit(gateway)
        self.assertEqual(result.error.kind, ErrorKind.INVALID_IMAGE)
        gateway.create.assert_not_called()

    async def test_saving_flag_cleared_on_error(self):
        gateway = AsyncMock()
        gateway.create.side_effect = RuntimeError("boom")
        composer = PinComposer()
        composer.attach_image(_jpeg_bytes(), "image/jpeg")
        with self.assertRaises(RuntimeError):
            await composer.submit(gateway)
        self.assertFalse(composer.saving)


if __name__ == "__main__":
    unittest.main()
