"""Unit tests for layer_deploy.sinks."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from layer_deploy.models import FunctionUpdateResult, Target
from layer_deploy.sinks import LoggerLogSink, WebhookLogSink, format_deploy_summary


def test_format_deploy_summary() -> None:
    result = FunctionUpdateResult(status_code=200, code_size=2500, cpu="arm64", memory=512)
    summary = format_deploy_summary("orders", Target("orders", "orders-api"), result)
    assert summary.splitlines() == [
        "### orders deployed!  ",
        "target: orders-orders-api  ",
        "statusCode: 200  ",
        "codeSize: 2.5KB  ",
        "cpu: arm64  ",
        "memory: 512 MB  ",
    ]


def test_format_deploy_summary_missing_fields() -> None:
    summary = format_deploy_summary(
        "orders", Target("orders", "orders-api"), FunctionUpdateResult(status_code=200)
    )
    assert "codeSize: n/a  " in summary
    assert "cpu: n/a  " in summary
    assert "memory: n/a MB  " in summary


def test_logger_log_sink_writes_info() -> None:
    observer = MagicMock()
    LoggerLogSink(observer).emit("hello")
    observer.info.assert_called_once_with("hello")


def test_webhook_log_sink_posts_markdown() -> None:
    with patch("layer_deploy.sinks.requests.post") as post:
        WebhookLogSink("https://chat.example.com/hook", timeout=5).emit("### done")

    post.assert_called_once_with(
        "https://chat.example.com/hook",
        json={"msgtype": "markdown", "markdown": {"content": "### done"}},
        timeout=5,
    )
    post.return_value.raise_for_status.assert_called_once_with()


def test_webhook_log_sink_raises_on_http_error() -> None:
    with patch("layer_deploy.sinks.requests.post") as post:
        post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        with pytest.raises(requests.HTTPError):
            WebhookLogSink("https://chat.example.com/hook").emit("### done")
