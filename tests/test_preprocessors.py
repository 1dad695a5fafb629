from django.test import SimpleTestCase, override_settings

from viewer.markdown.preprocessors import apply_preprocessors, decode_payload
from viewer.markdown.preprocessors.fence_wrapper import wrap_fenced_code
from viewer.markdown.preprocessors.image_resolver import (
    join_paths,
    resolve_image_links,
    resolve_target,
)


class FenceWrapperTests(SimpleTestCase):
    def test_markdown_passes_through(self):
        text = "# Title\n\n*body*"
        for ext in (None, "", "md", "MD", "markdown"):
            with self.subTest(ext=ext):
                self.assertEqual(wrap_fenced_code(text, {"ext": ext}), text)

    def test_other_extensions_become_one_code_block(self):
        self.assertEqual(
            wrap_fenced_code('{"a":1}', {"ext": "json"}),
            '```json\n{"a":1}\n```',
        )

    def test_fence_outgrows_backticks_in_content(self):
        text = "before\n```\ninside\n```\nafter"
        wrapped = wrap_fenced_code(text, {"ext": "txt"})

        self.assertEqual(wrapped, f"````txt\n{text}\n````")


class ImageResolverTests(SimpleTestCase):
    def test_relative_target_resolves_against_document_directory(self):
        text = resolve_image_links("![alt](./img.png)", {"path": "/docs/page.md"})

        self.assertEqual(text, "![alt](/api/d/alice/docs/img.png)")

    def test_readme_resolves_against_its_own_path(self):
        self.assertEqual(
            resolve_image_links("![a](img.png)", {"path": "/docs", "readme": True}),
            "![a](/api/d/alice/docs/img.png)",
        )
        self.assertEqual(
            resolve_image_links("![a](img.png)", {"path": "/docs", "readme": False}),
            "![a](/api/d/alice/img.png)",
        )

    def test_absolute_and_parent_targets(self):
        context = {"path": "/docs/guide/page.md"}

        self.assertEqual(
            resolve_image_links("![a](/images/logo.png)", context),
            "![a](/api/d/alice/images/logo.png)",
        )
        self.assertEqual(
            resolve_image_links("![a](../shot.png)", context),
            "![a](/api/d/alice/docs/shot.png)",
        )

    def test_remote_and_inline_targets_are_untouched(self):
        for text in (
            "![a](data:image/png;base64,iVBORw0KGgo=)",
            "![a](http://x.com/i.png)",
            "![alt](https://x.com/i.png)",
            "![a](//cdn.x.com/i.png)",
        ):
            with self.subTest(text=text):
                self.assertEqual(resolve_image_links(text, {"path": "/docs/page.md"}), text)

    def test_alt_text_and_surrounding_text_preserved(self):
        text = "See ![My *diagram*](pic.png) and [a link](other.md)."

        self.assertEqual(
            resolve_image_links(text, {"path": "/notes/a.md"}),
            "See ![My *diagram*](/api/d/alice/notes/pic.png) and [a link](other.md).",
        )

    def test_malformed_syntax_is_left_alone(self):
        for text in ("![alt](broken", "![alt]", "!(x.png)"):
            with self.subTest(text=text):
                self.assertEqual(resolve_image_links(text, {"path": "/docs/page.md"}), text)

    def test_context_overrides_settings(self):
        text = resolve_image_links(
            "![a](img.png)",
            {"path": "/docs/page.md", "base_path": "https://files.example/", "storage_root": "/bob/"},
        )

        self.assertEqual(text, "![a](https://files.example/d/bob/docs/img.png)")

    @override_settings(MARKDOWN_VIEWER={})
    def test_defaults_without_settings(self):
        self.assertEqual(
            resolve_image_links("![a](img.png)", {"path": "/docs/page.md"}),
            "![a](/d/docs/img.png)",
        )

    def test_source_files_are_not_rewritten(self):
        text = "![a](img.png)"

        self.assertEqual(resolve_image_links(text, {"ext": "py", "path": "/a.py"}), text)

    def test_path_helpers(self):
        self.assertEqual(join_paths("/", "/docs/img.png"), "/docs/img.png")
        self.assertEqual(join_paths("/alice/", "docs//img.png"), "/alice/docs/img.png")
        self.assertEqual(resolve_target("/abs.png", "/docs/page.md"), "/abs.png")
        self.assertEqual(resolve_target("a/../b.png", "/page.md"), "/b.png")


class ApplyPreprocessorsTests(SimpleTestCase):
    def test_non_markdown_text_is_wrapped_verbatim(self):
        raw = "![keep](me.png)\n# not a heading"

        self.assertEqual(
            apply_preprocessors(raw, {"ext": "txt", "path": "/x.txt"}),
            f"```txt\n{raw}\n```",
        )

    def test_markdown_gets_images_rewritten(self):
        self.assertEqual(
            apply_preprocessors("![a](b.png)", {"ext": "md", "path": "/docs/page.md"}),
            "![a](/api/d/alice/docs/b.png)",
        )


class DecodePayloadTests(SimpleTestCase):
    def test_text_passes_through(self):
        self.assertEqual(decode_payload("héllo"), "héllo")

    def test_bytes_use_selected_encoding(self):
        payload = "Café".encode("latin-1")

        self.assertEqual(decode_payload(payload, "latin-1"), "Café")
        self.assertEqual(decode_payload(bytearray(b"abc")), "abc")
        self.assertEqual(decode_payload(memoryview(b"abc")), "abc")

    def test_undecodable_bytes_are_replaced(self):
        self.assertEqual(decode_payload(b"a\xffb", "utf-8"), "a\ufffdb")

    def test_unknown_encoding_raises(self):
        with self.assertRaises(LookupError):
            decode_payload(b"abc", "no-such-codec")

    def test_unsupported_type_raises(self):
        with self.assertRaises(TypeError):
            decode_payload(42)
