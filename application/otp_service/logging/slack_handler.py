import logging
from datetime import datetime, timezone

import requests

from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()


class SlackErrorHandler(logging.Handler):
    """Sends ERROR and CRITICAL logs to Slack"""

    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.webhook = configs.SLACK_WEBHOOK_URL
        self.enabled = bool(self.webhook)

    def emit(self, record):
        if not self.enabled:
            return
        try:
            env = configs.APPLICATION_ENVIRONMENT.upper()
            ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
            lines = [
                f":mag: {env} alert from {configs.APP_NAME}",
                "",
                f"- :clock1: Timestamp: {ts}",
                f"- :triangular_flag_on_post: Level: *{record.levelname}*",
                f"- :warning: Logger: {record.name}",
                f"- :file_folder: Module: {record.module}",
                f"- :pushpin: Function: {record.funcName}",
                f"- :straight_ruler: Line Number: {record.lineno}",
                "",
                "```" + record.getMessage() + "```",
            ]
            requests.post(self.webhook, json={"text": "\n".join(lines)}, timeout=2)
        except Exception:
            self.handleError(record)


slack_handler = SlackErrorHandler()
