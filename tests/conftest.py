"""
pytest configuration and fixtures.
"""

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spanparse import ParserConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /api/users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "John", "email": "john@example.com"}'
    head = (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )
    return head % len(body) + body


@pytest.fixture
def chunked_request() -> bytes:
    """POST request with a chunked body spelling "Wikipedia"."""
    return (
        b"POST /upload HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\nWiki\r\n"
        b"5\r\npedia\r\n"
        b"0\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_response() -> bytes:
    """Response using bare LF line endings."""
    return (
        b"HTTP/1.1 200 OK\n"
        b"Date: Mon, 27 Jul 2009 12:28:53 GMT\n"
        b"Server: Apache/2.2.14 (Win32)\n"
        b"Last-Modified: Wed, 22 Jul 2009 19:15:56 GMT\n"
        b"Content-Length: 52\n"
        b"Content-Type: text/html\n"
        b"Connection: Closed\n"
        b"\n"
        b"<html>\n<body>\n<h1>Hello, World!</h1>\n</body>\n</html>"
    )


@pytest.fixture
def json_document() -> bytes:
    """JSON document mixing every value type and odd whitespace."""
    return (
        b'  { "foo" : [null,42, {"test":"ok"},    -16],\n'
        b'    "bar": {"pi": 3.14e0, "flag": true, "off": false},\n'
        b'    "esc": "tab\\there \\u00e9 \\ud83d\\ude00" }  '
    )


@pytest.fixture
def config() -> ParserConfig:
    """Default test parser configuration."""
    return ParserConfig()
