# tests/test_webhook_sender.py

"""Tests for WebhookSender."""

import unittest
from unittest.mock import MagicMock, patch

from src.delivery.webhook_sender import WebhookSender

_PAYLOAD = {"event": "GOLD_PRICE_UPDATE", "hasChanged": True}


@patch("src.delivery.webhook_sender.curl_requests.Session")
class TestWebhookSender(unittest.TestCase):
    """WebhookSender.send behaviour."""

    def _sender(self, mock_session_cls: MagicMock, status: int) -> WebhookSender:
        resp = MagicMock()
        resp.status_code = status
        mock_session_cls.return_value.post.return_value = resp
        return WebhookSender("https://n8n.example.com/webhook/gold")

    def test_success(self, mock_session_cls: MagicMock) -> None:
        """2xx responses are a successful delivery."""
        result = self._sender(mock_session_cls, 200).send(_PAYLOAD)
        self.assertTrue(result.success)
        self.assertEqual(result.status_code, 200)

    def test_posts_json_with_user_agent(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """The payload is sent as JSON with the monitor user agent."""
        self._sender(mock_session_cls, 204).send(_PAYLOAD)
        post = mock_session_cls.return_value.post
        post.assert_called_once()
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://n8n.example.com/webhook/gold")
        self.assertEqual(kwargs["json"], _PAYLOAD)
        self.assertEqual(
            kwargs["headers"]["User-Agent"], "GoldPriceMonitor/1.0"
        )
        self.assertEqual(kwargs["timeout"], 30)

    def test_http_error(self, mock_session_cls: MagicMock) -> None:
        """Non-2xx responses are reported with their status."""
        result = self._sender(mock_session_cls, 500).send(_PAYLOAD)
        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 500)
        self.assertEqual(result.error, "HTTP 500")

    def test_transport_error_does_not_raise(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Network failures become a failed result."""
        mock_session_cls.return_value.post.side_effect = TimeoutError(
            "timed out"
        )
        result = WebhookSender("https://n8n.example.com/x").send(_PAYLOAD)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "timed out")
        self.assertIsNone(result.status_code)

    def test_no_url_skips(self, mock_session_cls: MagicMock) -> None:
        """Without a URL nothing is posted."""
        result = WebhookSender("").send(_PAYLOAD)
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "No webhook URL configured")
        mock_session_cls.assert_not_called()

    def test_session_closed_after_send(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """Each send opens its own session and closes it."""
        sender = self._sender(mock_session_cls, 200)
        mock_session_cls.assert_not_called()
        sender.send(_PAYLOAD)
        sender.send(_PAYLOAD)
        self.assertEqual(mock_session_cls.call_count, 2)
        self.assertEqual(mock_session_cls.return_value.close.call_count, 2)

    def test_session_closed_on_transport_error(
        self, mock_session_cls: MagicMock,
    ) -> None:
        """A failed POST still releases the session."""
        mock_session_cls.return_value.post.side_effect = ConnectionError(
            "refused"
        )
        WebhookSender("https://n8n.example.com/x").send(_PAYLOAD)
        mock_session_cls.return_value.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
