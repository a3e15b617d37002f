import unittest

import httpx

from detection import LanguageDetector
from relay import ChatMessage, Relay, ZERO_WIDTH_JOINER, format_mention, format_reply, normalize_text
from translation import GroqTranslator, TranslationError

REPLACEMENTS = {
    "fuchsgewand": "foxguy",
    "Fuchsgewand": "Foxguy",
    "FuchsGewand": "FoxGuy",
}


class StubDetector:
    def __init__(self, language="de"):
        self.language = language
        self.calls = []

    def detect_language_of(self, text):
        self.calls.append(text)
        return self.language


class StubTranslator:
    def __init__(self, result="translated", error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def translate(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result


def make_relay(detector=None, translator=None, bot_username="TransBot"):
    return Relay(
        bot_username,
        detector or StubDetector(),
        translator or StubTranslator(),
        trigger_language="de",
        replacements=REPLACEMENTS,
    )


class TestNormalizeText(unittest.TestCase):
    def test_replaces_each_variant(self):
        self.assertEqual(normalize_text("fuchsgewand ist toll", REPLACEMENTS), "foxguy ist toll")
        self.assertEqual(normalize_text("Fuchsgewand und FuchsGewand", REPLACEMENTS), "Foxguy und FoxGuy")

    def test_is_case_sensitive(self):
        self.assertEqual(normalize_text("FUCHSGEWAND ist da", REPLACEMENTS), "FUCHSGEWAND ist da")

    def test_idempotent(self):
        for text in ["fuchsgewand ist toll", "FuchsGewand Fuchsgewand fuchsgewand", "nichts zu tun", ""]:
            once = normalize_text(text, REPLACEMENTS)
            self.assertEqual(normalize_text(once, REPLACEMENTS), once)

    def test_empty_replacements(self):
        self.assertEqual(normalize_text("fuchsgewand ist toll", {}), "fuchsgewand ist toll")


class TestFormatReply(unittest.TestCase):
    def test_mention_inserts_joiner_after_first_character(self):
        self.assertEqual(format_mention("bob"), "@b\u200dob")
        self.assertEqual(format_mention("B"), "@B\u200d")

    def test_mention_non_ascii_first_character(self):
        self.assertEqual(format_mention("Ölf"), "@Ö\u200dlf")

    def test_reply_format(self):
        self.assertEqual(
            format_reply("bob", "foxguy is great"),
            "/me \U0001F916 @b" + ZERO_WIDTH_JOINER + "ob: foxguy is great",
        )


class TestRelay(unittest.IsolatedAsyncioTestCase):
    async def test_translates_trigger_language(self):
        translator = StubTranslator("foxguy is great")
        relay = make_relay(translator=translator)
        reply = await relay.handle(ChatMessage("bob", "bob", "fuchsgewand ist toll"))
        self.assertEqual(reply, "/me \U0001F916 @b\u200dob: foxguy is great")
        self.assertEqual(translator.calls, ["foxguy ist toll"])

    async def test_detector_sees_normalized_text(self):
        detector = StubDetector()
        relay = make_relay(detector=detector)
        await relay.handle(ChatMessage("bob", "Bob", "Fuchsgewand ist toll"))
        self.assertEqual(detector.calls, ["Foxguy ist toll"])

    async def test_single_word_is_ignored(self):
        detector = StubDetector()
        translator = StubTranslator()
        relay = make_relay(detector=detector, translator=translator)
        for text in ["hallo", "  hallo  ", "Kappa", ""]:
            self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", text)))
        self.assertEqual(detector.calls, [])
        self.assertEqual(translator.calls, [])

    async def test_own_messages_are_ignored(self):
        translator = StubTranslator()
        relay = make_relay(translator=translator, bot_username="TransBot")
        reply = await relay.handle(ChatMessage("transbot", "TransBot", "das ist ein deutscher Satz"))
        self.assertIsNone(reply)
        self.assertEqual(translator.calls, [])

    async def test_no_confident_match(self):
        translator = StubTranslator()
        relay = make_relay(detector=StubDetector(None), translator=translator)
        self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", "ja ok")))
        self.assertEqual(translator.calls, [])

    async def test_native_language_is_not_translated(self):
        translator = StubTranslator()
        relay = make_relay(detector=StubDetector("en"), translator=translator)
        self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", "this is english")))
        self.assertEqual(translator.calls, [])

    async def test_translation_failure_posts_nothing(self):
        relay = make_relay(translator=StubTranslator(error=TranslationError("no translations received")))
        with self.assertLogs("relay", level="ERROR") as logs:
            reply = await relay.handle(ChatMessage("bob", "bob", "das ist toll"))
        self.assertIsNone(reply)
        self.assertIn("no translations received", logs.output[0])

    async def test_empty_display_name_falls_back_to_login(self):
        relay = make_relay(translator=StubTranslator("hello you"))
        reply = await relay.handle(ChatMessage("bob", "", "hallo du"))
        self.assertEqual(reply, "/me \U0001F916 @b\u200dob: hello you")

    async def test_surrounding_whitespace_is_passed_through(self):
        detector = StubDetector()
        translator = StubTranslator()
        relay = make_relay(detector=detector, translator=translator)
        await relay.handle(ChatMessage("bob", "bob", " fuchsgewand ist toll "))
        self.assertEqual(detector.calls, [" foxguy ist toll "])
        self.assertEqual(translator.calls, [" foxguy ist toll "])


class TestRelayWithLanguageDetector(unittest.IsolatedAsyncioTestCase):
    @classmethod
    def setUpClass(cls):
        cls.detector = LanguageDetector(["en", "de"], minimum_relative_distance=0.80)

    async def test_ambiguous_short_phrase_is_not_translated(self):
        translator = StubTranslator()
        relay = make_relay(detector=self.detector, translator=translator)
        for text in ["ja ok", "hallo du", "das ist toll"]:
            self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", text)))
        self.assertEqual(translator.calls, [])

    async def test_german_message_is_translated(self):
        translator = StubTranslator("how are you")
        relay = make_relay(detector=self.detector, translator=translator)
        reply = await relay.handle(ChatMessage("bob", "bob", "wie geht es dir"))
        self.assertEqual(reply, "/me \U0001F916 @b\u200dob: how are you")
        self.assertEqual(translator.calls, ["wie geht es dir"])

    async def test_english_message_is_not_translated(self):
        translator = StubTranslator()
        relay = make_relay(detector=self.detector, translator=translator)
        text = "I would really like to watch the whole stream tonight, but I have to work early tomorrow."
        self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", text)))
        self.assertEqual(translator.calls, [])


class TestRelayWithTranslatorFailures(unittest.IsolatedAsyncioTestCase):
    """Failures from the HTTP layer stay inside one message."""

    def make(self, responses):
        queue = list(responses)

        def handler(request):
            return queue.pop(0)

        translator = GroqTranslator("key", transport=httpx.MockTransport(handler))
        return make_relay(translator=translator)

    async def assert_failure_then_recovery(self, failure):
        ok = httpx.Response(200, json={"choices": [{"message": {"content": " hello there \n"}}]})
        relay = self.make([failure, ok])
        with self.assertLogs("relay", level="ERROR"):
            self.assertIsNone(await relay.handle(ChatMessage("bob", "bob", "hallo da")))
        reply = await relay.handle(ChatMessage("bob", "bob", "hallo da"))
        self.assertEqual(reply, "/me \U0001F916 @b\u200dob: hello there")

    async def test_non_200_status(self):
        await self.assert_failure_then_recovery(httpx.Response(500, text="boom"))

    async def test_api_error_message(self):
        await self.assert_failure_then_recovery(httpx.Response(200, json={"error": {"message": "x"}}))

    async def test_zero_choices(self):
        await self.assert_failure_then_recovery(httpx.Response(200, json={"choices": []}))


if __name__ == "__main__":
    unittest.main()
