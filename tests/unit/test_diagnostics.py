"""Unit tests for TeX log excerpt extraction and log parsing."""

import pytest

from texforge.contexts.rendering.diagnostics import decode_log, extract_message, parse_log


@pytest.mark.unit
def test_extract_undefined_control_sequence():
    """Test excerpt runs from the error line through the l.<n> line, inclusive."""
    log = (
        b"This is pdfTeX, Version 3.141592653\n"
        b"(./input.tex\n"
        b"! Undefined control sequence.\n"
        b"<recently read> \\foo\n"
        b"l.5 \\foo\n"
        b"No pages of output.\n"
        b"Transcript written on input.log.\n"
    )

    excerpt = extract_message(log)

    assert excerpt == b"! Undefined control sequence.\n<recently read> \\foo\nl.5 \\foo\n"


@pytest.mark.unit
def test_extract_minimal_error_log():
    """Test the minimal three-part log shape."""
    log = b"! Undefined control sequence.\n...\nl.5 \\foo\n..."
    assert extract_message(log) == b"! Undefined control sequence.\n...\nl.5 \\foo\n"


@pytest.mark.unit
@pytest.mark.parametrize(
    "log",
    [
        b"",
        b"This is pdfTeX\nOutput written on input.pdf (1 page).\n",
        b"no trailing newline",
        b"warning: something ! not at line start\nl.3 stray line marker\n",
    ],
)
def test_extract_without_error_marker_returns_log_unchanged(log):
    """Test logs without a '!' line come back byte-for-byte."""
    assert extract_message(log) == log


@pytest.mark.unit
def test_extract_without_line_number_takes_rest_of_log():
    """Test that a missing l. line keeps every line after the error."""
    log = b"preamble\n! Emergency stop.\n<*> input.tex\nend of file\n"
    assert extract_message(log) == b"! Emergency stop.\n<*> input.tex\nend of file\n"


@pytest.mark.unit
def test_extract_uses_first_error_only_one_line_number():
    """Test that only the first error and the first following l. line are kept."""
    log = b"! First.\nl.1 a\nl.2 b\n! Second.\nl.9 z\n"
    assert extract_message(log) == b"! First.\nl.1 a\n"


@pytest.mark.unit
def test_extract_handles_crlf_and_invalid_utf8():
    """Test Windows line endings and non-UTF-8 bytes do not break extraction."""
    log = b"junk \xff\xfe\r\n! Bad \xe9.\r\nl.7 x\r\nrest\r\n"
    assert extract_message(log) == b"! Bad \xe9.\nl.7 x\n"


@pytest.mark.unit
def test_parse_log_errors_and_warnings():
    """Test error and warning collection from decoded log text."""
    text = (
        "LaTeX Warning: Reference `fig:a' on page 1 undefined on input line 3.\n"
        "Package hyperref Warning: Token not allowed in a PDF string.\n"
        "Overfull \\hbox (12.3pt too wide) in paragraph at lines 4--5\n"
        "! Missing $ inserted.\n"
    )

    errors, warnings = parse_log(text)

    assert errors == ["Missing $ inserted."]
    assert len(warnings) == 3
    assert warnings[2] == "12.3pt too wide"


@pytest.mark.unit
def test_decode_log_falls_back_to_latin1():
    assert decode_log(b"caf\xc3\xa9") == "café"
    assert decode_log(b"caf\xe9") == "café"
