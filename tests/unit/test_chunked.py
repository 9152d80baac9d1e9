"""
Unit tests for chunked transfer coding.
"""

import pytest

from spanparse import ChunkedBody, ErrorKind, HttpParseError, Span, parse_http_request
from spanparse.core.combinators import literal
from spanparse.core.cursor import Cursor
from spanparse.core.errors import ParseError
from spanparse.http.chunked import ChunkedDecoder

WIKIPEDIA = b"4\r\nWiki\r\n5\r\npedia\r\n0\r\n\r\n"


def no_trailers(cursor):
    """Trailer parser that only accepts the final empty line."""
    cursor.expect_literal(b"\r\n", "CRLF")
    return ()


@pytest.fixture
def decoder() -> ChunkedDecoder:
    return ChunkedDecoder(literal(b"\r\n", "CRLF"), no_trailers)


class TestChunkedDecoder:
    """Tests for the chunked state machine on its own."""

    def test_decode_wikipedia(self, decoder):
        """Test the classic two-chunk example."""
        cursor = Cursor(WIKIPEDIA)
        result = decoder.decode(cursor)
        body = result.value

        assert body.decode(WIKIPEDIA) == b"Wikipedia"
        assert body.length == 9
        assert result.span == Span(0, len(WIKIPEDIA))
        assert cursor.at_end()

    def test_chunk_spans(self, decoder):
        """Test the span layout of each chunk."""
        body = decoder.decode(Cursor(WIKIPEDIA)).value
        first, second, last = body.chunks

        assert first.span == Span(0, 9)
        assert first.value.size_line == Span(0, 1)
        assert first.value.data == Span(3, 7)
        assert second.span == Span(9, 19)
        assert second.value.data.extract(WIKIPEDIA) == b"pedia"
        assert last.value.is_last
        assert last.span == Span(19, 22)
        assert body.content_spans() == (Span(3, 7), Span(12, 17))

    def test_chunk_spans_tile_body(self, decoder):
        """Test that chunk spans are adjacent and disjoint."""
        chunks = decoder.decode(Cursor(WIKIPEDIA)).value.chunks

        for before, after in zip(chunks, chunks[1:]):
            assert before.span.end == after.span.start
            assert before.span.disjoint(after.span)

    def test_hex_sizes(self, decoder):
        """Test upper- and lowercase hex chunk sizes."""
        data = b"A\r\n0123456789\r\nb\r\nabcdefghijk\r\n0\r\n\r\n"
        body = decoder.decode(Cursor(data)).value

        assert [c.value.size for c in body.chunks] == [10, 11, 0]

    def test_extensions(self, decoder):
        """Test that chunk extensions are kept verbatim."""
        data = b"4;name=value\r\nWiki\r\n0\r\n\r\n"
        chunk = decoder.decode(Cursor(data)).value.chunks[0].value

        assert chunk.extensions.extract(data) == b";name=value"
        assert chunk.size_line.extract(data) == b"4;name=value"
        assert chunk.data.extract(data) == b"Wiki"

    def test_no_extensions(self, decoder):
        """Test chunks without extensions."""
        chunk = decoder.decode(Cursor(WIKIPEDIA)).value.chunks[0].value
        assert chunk.extensions is None

    def test_invalid_size(self, decoder):
        """Test a size line that is not hex."""
        cursor = Cursor(b"zz\r\n")
        with pytest.raises(ParseError) as exc_info:
            decoder.decode(cursor)

        assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_SIZE
        assert exc_info.value.offset == 0
        assert cursor.offset == 0

    def test_junk_after_size(self, decoder):
        """Test a non-hex byte after the size digits."""
        with pytest.raises(ParseError) as exc_info:
            decoder.decode(Cursor(b"4x\r\nWiki\r\n0\r\n\r\n"))

        assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_SIZE
        assert exc_info.value.offset == 1

    def test_oversized_size(self, decoder):
        """Test a chunk size with too many hex digits."""
        with pytest.raises(ParseError) as exc_info:
            decoder.decode(Cursor(b"1" * 17 + b"\r\n"))

        assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_SIZE

    def test_data_longer_than_size(self, decoder):
        """Test chunk data not followed by CRLF."""
        with pytest.raises(ParseError) as exc_info:
            decoder.decode(Cursor(b"4\r\nWikiX\r\n0\r\n\r\n"))

        assert exc_info.value.kind is ErrorKind.UNEXPECTED_TOKEN
        assert exc_info.value.offset == 7

    @pytest.mark.parametrize("cut", [1, 3, 5, 8, 20, 22])
    def test_truncated_body(self, decoder, cut):
        """Test that a truncated body fails with EOF and no drift."""
        cursor = Cursor(WIKIPEDIA[:cut])
        with pytest.raises(ParseError) as exc_info:
            decoder.decode(cursor)

        assert exc_info.value.kind is ErrorKind.UNEXPECTED_EOF
        assert cursor.offset == 0


class TestChunkedRequest:
    """Tests for chunked bodies inside full requests."""

    def test_chunked_request(self, chunked_request):
        """Test a chunked request parses to the full buffer."""
        message = parse_http_request(chunked_request)
        body = message.value.body

        assert isinstance(body.value, ChunkedBody)
        assert body.value.decode(chunked_request) == b"Wikipedia"
        assert body.span.start == message.value.head.end
        assert message.span == Span(0, len(chunked_request))

    def test_trailers(self):
        """Test trailer fields after the last chunk."""
        data = (
            b"POST / HTTP/1.1\r\n"
            b"Transfer-Encoding: chunked\r\n"
            b"\r\n"
            b"4\r\nWiki\r\n"
            b"0\r\n"
            b"Checksum: abc123\r\n"
            b"Expires: never\r\n"
            b"\r\n"
        )
        body = parse_http_request(data).value.body.value

        assert [t.value.name.value for t in body.trailers] == ["Checksum", "Expires"]
        assert body.trailers[0].value.value.extract(data) == b"abc123"

    def test_chunked_with_bare_lf(self):
        """Test chunk lines terminated by bare LF."""
        data = b"POST / HTTP/1.1\nTransfer-Encoding: chunked\n\n4\nWiki\n0\n\n"
        body = parse_http_request(data).value.body

        assert body.value.decode(data) == b"Wiki"

    def test_chunked_error_is_http_error(self):
        """Test decoder failures surface as HttpParseError."""
        data = b"POST / HTTP/1.1\r\nTransfer-Encoding: chunked\r\n\r\nxyz\r\n"
        with pytest.raises(HttpParseError) as exc_info:
            parse_http_request(data)

        assert exc_info.value.kind is ErrorKind.INVALID_CHUNK_SIZE
        assert exc_info.value.offset == data.index(b"xyz")
