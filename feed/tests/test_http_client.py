import unittest
from unittest.mock import MagicMock, patch

import requests

from utils.errors import DecodeFailure, RemoteSourceFailure
from utils.http_client import HttpClient
from utils.security import redact_secrets


def _response(status: int, json_body=None, text: str = ""):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp


class HttpClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = HttpClient(timeout=3, max_retries=0)

    def tearDown(self) -> None:
        self.client.close()

    def test_returns_json_body(self):
        with patch.object(self.client.session, "get", return_value=_response(200, {"ok": True})) as get:
            self.assertEqual(self.client.get_json("https://api.example/x", params={"a": 1}), {"ok": True})
        get.assert_called_once_with("https://api.example/x", params={"a": 1}, timeout=3)

    def test_non_2xx_carries_status_code(self):
        with patch.object(self.client.session, "get", return_value=_response(404, text="missing")):
            with self.assertRaises(RemoteSourceFailure) as ctx:
                self.client.get_json("https://api.example/member/X?api_key=abc123")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertNotIn("abc123", str(ctx.exception))

    def test_transport_error_and_bad_json(self):
        with patch.object(self.client.session, "get", side_effect=requests.ConnectionError("refused")):
            with self.assertRaises(RemoteSourceFailure) as ctx:
                self.client.get_json("https://api.example/x")
        self.assertIsNone(ctx.exception.status_code)

        with patch.object(self.client.session, "get", return_value=_response(200, ValueError("no json"))):
            with self.assertRaises(DecodeFailure):
                self.client.get_json("https://api.example/x")

    def test_redaction(self):
        text = "GET https://api.congress.gov/v3/member?api_key=SECRET&format=json Authorization: Bearer tok.en"
        redacted = redact_secrets(text)
        self.assertNotIn("SECRET", redacted)
        self.assertNotIn("tok.en", redacted)
        self.assertIn("format=json", redacted)


if __name__ == "__main__":
    unittest.main()
