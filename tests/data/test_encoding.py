"""Tests for export decoding."""

from tradelog_app.data.encoding import DEFAULT_ENCODING, decode_export


class TestDecodeExport:
    """Test decode_export."""

    def test_default_encoding_is_cp932(self):
        assert DEFAULT_ENCODING == "cp932"

    def test_decode_shift_jis(self):
        text = "約定日,銘柄,銘柄コード"
        assert decode_export(text.encode("shift_jis")) == text

    def test_decode_cp932_extension_characters(self):
        """cp932 covers vendor extensions such as circled digits."""
        text = "①株式"
        assert decode_export(text.encode("cp932")) == text

    def test_utf8_bom_takes_precedence(self):
        text = "国内約定日,銘柄名"
        assert decode_export(b"\xef\xbb\xbf" + text.encode("utf-8")) == text

    def test_malformed_bytes_are_replaced(self):
        """Truncated multi-byte sequences decode with replacement characters."""
        decoded = decode_export("銘柄".encode("cp932")[:-1])
        assert decoded.startswith("銘")
        assert "�" in decoded

    def test_explicit_encoding(self):
        assert decode_export("Apple".encode("utf-16"), encoding="utf-16") == "Apple"

    def test_bytearray_input(self):
        assert decode_export(bytearray(b"abc")) == "abc"

    def test_text_passthrough(self):
        assert decode_export("already text") == "already text"
