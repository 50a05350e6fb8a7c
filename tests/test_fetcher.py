"""
Tests for the JSON fetcher.

Run with: pytest tests/test_fetcher.py -v
"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

# Add scripts directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from fetcher import FetchError, fetch_json


def make_response(body=None, status=200, error=None):
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if error is not None:
        response.json.side_effect = error
    else:
        response.json.return_value = body
    return response


class TestFetchJson:
    """Tests for fetch_json."""

    def test_returns_parsed_body(self):
        """A valid JSON body is returned as Python data."""
        with patch("fetcher.requests.get", return_value=make_response([{"slug": "ruido"}])) as get:
            data = fetch_json("https://example.org/campaigns.json")

        assert data == [{"slug": "ruido"}]
        get.assert_called_once_with("https://example.org/campaigns.json")

    def test_non_2xx_body_is_still_parsed(self):
        """HTTP errors are not failures on their own; the body decides."""
        with patch("fetcher.requests.get", return_value=make_response({"error": "gone"}, status=404)):
            data = fetch_json("https://example.org/stats/x.json")

        assert data == {"error": "gone"}

    def test_invalid_json_raises_fetch_error(self):
        """An unparseable body raises FetchError with URL and cause."""
        cause = ValueError("Expecting value")
        with patch("fetcher.requests.get", return_value=make_response(error=cause)):
            with pytest.raises(FetchError) as exc_info:
                fetch_json("https://example.org/stats/x.json")

        assert exc_info.value.url == "https://example.org/stats/x.json"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause

    def test_transport_error_raises_fetch_error(self):
        """Connection problems surface as FetchError."""
        cause = requests.exceptions.ConnectionError("boom")
        with patch("fetcher.requests.get", side_effect=cause):
            with pytest.raises(FetchError) as exc_info:
                fetch_json("https://example.org/campaigns.json")

        assert exc_info.value.cause is cause
        assert "https://example.org/campaigns.json" in str(exc_info.value)

    def test_uses_given_session(self):
        """A caller-supplied session is used instead of the module-level API."""
        session = Mock()
        session.get.return_value = make_response({"ok": True})

        with patch("fetcher.requests.get") as module_get:
            assert fetch_json("https://example.org/a.json", session=session) == {"ok": True}

        session.get.assert_called_once_with("https://example.org/a.json")
        module_get.assert_not_called()

    @pytest.mark.parametrize("url", [
        "http://example.org/campaigns.json",
        "example.org/campaigns.json",
        "https://",
        "",
    ])
    def test_rejects_non_https_urls(self, url):
        """Only absolute https URLs are fetched."""
        with patch("fetcher.requests.get") as get:
            with pytest.raises(FetchError):
                fetch_json(url)

        get.assert_not_called()
