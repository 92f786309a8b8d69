from app.intelligence.extraction.types import Malformed, MalformedReason
from app.intelligence.normalizer import normalize


class TestNormalize:
    def test_trims_and_collapses_whitespace(self):
        assert normalize("  Gasto   R$ 50\n\ncom almoço  ") == "Gasto R$ 50 com almoço"

    def test_control_characters_become_single_space(self):
        assert normalize("Paguei\x00\x07R$ 120\tluz") == "Paguei R$ 120 luz"

    def test_empty_and_blank_are_malformed(self):
        for raw in ("", "   ", "\n\t", "\x00\x01"):
            result = normalize(raw)
            assert isinstance(result, Malformed)
            assert result.reason == MalformedReason.EMPTY

    def test_none_is_malformed(self):
        result = normalize(None)
        assert isinstance(result, Malformed)
        assert result.outcome == "malformed:empty"

    def test_truncates_long_input(self):
        assert normalize("a" * 50, max_length=10) == "a" * 10

    def test_deterministic(self):
        raw = " Recebi\r\nR$ 2000  salário "
        assert normalize(raw) == normalize(raw)
