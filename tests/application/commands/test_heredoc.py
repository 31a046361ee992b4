# tests/application/commands/test_heredoc.py
import pytest
from application.commands.heredoc import heredoc_terminator, read_payload, read_until
from application.parsing.line_source import LineSource
from domain.errors import HeredocError


class TestReadUntil:
    def test_stops_at_terminator(self):
        lines = LineSource("  a\nb  \nEND\nafter\n")
        body, consumed = read_until(lines, "END")

        assert body == ["a", "b"]
        assert consumed == 3
        assert lines.read_line() == "after\n"

    def test_missing_terminator_reads_to_end(self):
        body, consumed = read_until(LineSource("a\nb\n"), "END")
        assert body == ["a", "b"]
        assert consumed == 2

    def test_terminator_must_match_whole_line(self):
        body, consumed = read_until(LineSource("END of it\nEND\n"), "END")
        assert body == ["END of it"]
        assert consumed == 2


class TestReadPayload:
    def test_inline_payload(self):
        lines = LineSource("next\n")
        assert read_payload("{a: 1}", lines) == ("{a: 1}", 0)
        assert lines.read_line() == "next\n"

    def test_heredoc_payload(self):
        payload, consumed = read_payload("^EOF", LineSource("{\n  a: 1\n}\nEOF\n"))
        assert payload == "{\na: 1\n}"
        assert consumed == 4

    def test_empty_terminator(self):
        with pytest.raises(HeredocError):
            heredoc_terminator("^")
        with pytest.raises(HeredocError):
            read_payload("^  ", LineSource("x\n"))
