"""Tests for the statement buffer."""

from src.benangmerah_dm.fragments.buffer import StatementBuffer


def test_marker_commits_pending_statement() -> None:
    buffer = StatementBuffer()

    assert buffer.append("<a> <b> <c> ") is False
    assert buffer.size == 0
    assert buffer.append(".\n") is True

    assert buffer.text == "<a> <b> <c> .\n"
    assert buffer.size == len("<a> <b> <c> .\n")
    assert buffer.pending == ""
    assert buffer.statement_count == 1


def test_committed_size_excludes_trailing_unterminated_bytes() -> None:
    buffer = StatementBuffer()
    statements = ["<a> <b> <c> ", "<d> <e> \"f\" ", "<g> <h> <i> "]
    for text in statements:
        buffer.append(text)
        buffer.append(".\n")
    buffer.append("<j> <k> ")
    buffer.append("<l> ")

    assert buffer.size == sum(len(s) + 2 for s in statements)
    assert buffer.pending == "<j> <k> <l> "
    assert buffer.statement_count == 3


def test_marker_inside_chunk_does_not_commit() -> None:
    buffer = StatementBuffer()

    assert buffer.append("<a> <b> <c> .\n") is False
    assert buffer.size == 0
    assert buffer.pending == "<a> <b> <c> .\n"


def test_size_counts_utf8_bytes() -> None:
    buffer = StatementBuffer()
    buffer.append('<a> <b> "café" ')
    buffer.append(".\n")

    assert buffer.size == len('<a> <b> "café" .\n'.encode())


def test_take_resets_fragment_but_keeps_pending() -> None:
    buffer = StatementBuffer()
    buffer.append("<a> <b> <c> ")
    buffer.append(".\n")
    buffer.append("<d> ")

    assert buffer.take() == "<a> <b> <c> .\n"
    assert buffer.size == 0
    assert buffer.text == ""
    assert buffer.statement_count == 0
    assert buffer.pending == "<d> "


def test_discard_pending_returns_dropped_length() -> None:
    buffer = StatementBuffer()
    buffer.append("<d> <e> ")

    assert buffer.discard_pending() == 8
    assert buffer.pending == ""
