"""Tests for the decode error formatter."""

from coserv_store.loader.errors import ErrorFormatter
from coserv_store.loader.validator import DecodeErrorDetail


def _missing() -> DecodeErrorDetail:
    return DecodeErrorDetail(
        field="results.result_set.reference-values.rv_quads[0].triple",
        message="Field required",
        type="missing",
    )


class TestErrorFormatter:
    """Tests for human and CI output modes."""

    def test_ci_mode_concise(self):
        formatter = ErrorFormatter(ci_mode=True)
        output = formatter.format_error(_missing(), "doc.cbor")
        assert output == (
            "doc.cbor:results.result_set.reference-values.rv_quads[0].triple -- Field required"
        )

    def test_human_mode_has_code_and_location(self):
        formatter = ErrorFormatter(ci_mode=False)
        output = formatter.format_error(_missing(), "doc.cbor")
        assert output.startswith("error[E002]: required field missing")
        assert "  --> doc.cbor" in output
        assert "rv_quads[0].triple: Field required" in output

    def test_encoding_errors_code(self):
        formatter = ErrorFormatter(ci_mode=False)
        detail = DecodeErrorDetail(field="<cbor>", message="invalid CBOR", type="cbor_syntax_error")
        assert formatter.format_error(detail, "x").startswith("error[E006]: encoding error")

    def test_unmapped_type_falls_back(self):
        formatter = ErrorFormatter(ci_mode=False)
        assert formatter._get_error_code("bool_parsing") == "E004"
        assert formatter._get_error_code("something_new") == "E999"

    def test_format_all_joins_with_blank_lines(self):
        formatter = ErrorFormatter(ci_mode=True)
        output = formatter.format_all([_missing(), _missing()], "doc.cbor")
        assert output.count("\n\n") == 1

    def test_ci_mode_auto_detect(self, monkeypatch):
        monkeypatch.setenv("CI", "true")
        assert ErrorFormatter().ci_mode is True
        monkeypatch.setenv("CI", "")
        assert ErrorFormatter().ci_mode is False
