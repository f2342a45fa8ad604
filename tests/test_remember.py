"""Tests for the remember-pattern scanner and canned replies."""

from src.memory.remember import RememberMatch, build_reply, extract_note


class TestExtractNote:
    def test_english_pattern(self):
        match = extract_note("please remember that my cat is called Miso")
        assert match == RememberMatch(value="my cat is called Miso", language="en")

    def test_english_is_case_insensitive(self):
        match = extract_note("REMEMBER THAT the meeting is at 5")
        assert match is not None
        assert match.value == "the meeting is at 5"

    def test_persian_patterns(self):
        for trigger in ("یاد بگیر", "به خاطر بسپار", "یادت باشه"):
            match = extract_note(f"{trigger} که فردا جلسه دارم")
            assert match == RememberMatch(value="که فردا جلسه دارم", language="fa")

    def test_value_is_stripped(self):
        match = extract_note("remember that   tabs and spaces   ")
        assert match is not None
        assert match.value == "tabs and spaces"

    def test_no_trigger(self):
        assert extract_note("hello there") is None

    def test_trigger_without_note(self):
        assert extract_note("remember that ") is None

    def test_trigger_needs_whitespace(self):
        assert extract_note("remember thatcher") is None

    def test_note_stops_at_newline(self):
        match = extract_note("remember that line one\nline two")
        assert match is not None
        assert match.value == "line one"


class TestBuildReply:
    def test_stored_persian(self):
        reply = build_reply(RememberMatch(value="x", language="fa"), 1)
        assert "«x»" in reply
        assert reply.endswith("✅")

    def test_stored_english(self):
        reply = build_reply(RememberMatch(value="x", language="en"), 1)
        assert reply == 'Got it! I\'ll remember: "x" ✅'

    def test_not_stored_includes_count(self):
        reply = build_reply(None, 7)
        assert "(7 " in reply
