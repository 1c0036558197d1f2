"""
layer_deploy.sinks — Best-effort deploy progress sinks.

The orchestrator emits one markdown summary per target after its function
update.  Sink failures never abort a deploy.
"""

from __future__ import annotations

import requests
from aws_lambda_powertools import Logger

from layer_deploy.models import FunctionUpdateResult, Target
from layer_deploy.protocols import Observer

logger = Logger(service="layer-deploy")

DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 10


def format_deploy_summary(name: str, target: Target, result: FunctionUpdateResult) -> str:
    code_size = f"{result.code_size / 1000}KB" if result.code_size else "n/a"
    lines = [
        f"### {name} deployed!  ",
        f"target: {target.key}  ",
        f"statusCode: {result.status_code}  ",
        f"codeSize: {code_size}  ",
        f"cpu: {result.cpu or 'n/a'}  ",
        f"memory: {result.memory or 'n/a'} MB  ",
    ]
    return "\n".join(lines)


class LoggerLogSink:
    """Writes summaries to the observer at INFO level."""

    def __init__(self, observer: Observer | None = None) -> None:
        self._observer = observer or logger

    def emit(self, message: str) -> None:
        self._observer.info(message)


class WebhookLogSink:
    """Posts summaries as a markdown message to a chat webhook."""

    def __init__(self, url: str, *, timeout: int = DEFAULT_WEBHOOK_TIMEOUT_SECONDS) -> None:
        self._url = url
        self._timeout = timeout

    def emit(self, message: str) -> None:
        response = requests.post(
            self._url,
            json={"msgtype": "markdown", "markdown": {"content": message}},
            timeout=self._timeout,
        )
        response.raise_for_status()
