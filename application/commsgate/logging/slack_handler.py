import logging
from datetime import datetime, timezone

import requests

from commsgate.config.settings import GatewayConfigs
configs = GatewayConfigs()


class SlackErrorHandler(logging.Handler):
    """Posts ERROR and CRITICAL records to a Slack incoming webhook"""

    def __init__(self, webhook: str | None = None):
        super().__init__(level=logging.ERROR)
        self.webhook = webhook if webhook is not None else configs.SLACK_WEBHOOK_URL
        self.environment = configs.APPLICATION_ENVIRONMENT.upper()
        self.service = configs.APP_NAME

    @property
    def enabled(self) -> bool:
        return bool(self.webhook)

    def build_text(self, record) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        lines = [
            f":rotating_light: {self.service} {self.environment} alert",
            "",
            f"- :clock1: Timestamp: {ts}",
            f"- :triangular_flag_on_post: Level: *{record.levelname}*",
            f"- :warning: Logger: {record.name}",
            f"- :file_folder: Location: {record.module}.{record.funcName}:{record.lineno}",
            "",
            "```" + record.getMessage() + "```",
        ]
        return "\n".join(lines)

    def emit(self, record):
        if not self.enabled:
            return
        try:
            requests.post(self.webhook, json={"text": self.build_text(record)}, timeout=2)
        except Exception:
            self.handleError(record)


slack_handler = SlackErrorHandler()
