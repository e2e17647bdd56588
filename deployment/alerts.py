import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import requests

logger = logging.getLogger(__name__)


class Notifier:
    """Sends deployment alerts via email and/or Slack"""

    def __init__(self, settings):
        self.settings = settings

    def send_alert(self, message: str):
        logger.error(f"ALERT: {message}")

        if self.settings.smtp_username and self.settings.smtp_password and self.settings.notification_email:
            try:
                self._send_email_alert(message)
            except Exception as e:
                logger.error(f"Failed to send email alert: {e}")

        if self.settings.slack_webhook:
            try:
                self._send_slack_alert(message)
            except Exception as e:
                logger.error(f"Failed to send Slack alert: {e}")

    def _send_email_alert(self, message: str):
        msg = MIMEMultipart()
        msg['From'] = self.settings.smtp_username
        msg['To'] = self.settings.notification_email
        msg['Subject'] = f"Ubex deployment alert ({self.settings.network})"

        body = f"""
        Ubex Deployment Alert

        Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
        Network: {self.settings.network}
        RPC: {self.settings.rpc_url}
        Message: {message}
        """
        msg.attach(MIMEText(body, 'plain'))

        server = smtplib.SMTP(self.settings.smtp_server, self.settings.smtp_port)
        try:
            server.starttls()
            server.login(self.settings.smtp_username, self.settings.smtp_password)
            server.send_message(msg)
        finally:
            server.quit()

    def _send_slack_alert(self, message: str):
        payload = {
            "text": f"🚨 Ubex deployment alert: {message}",
            "attachments": [
                {
                    "fields": [
                        {"title": "Network", "value": self.settings.network, "short": True},
                        {"title": "RPC", "value": self.settings.rpc_url, "short": True},
                    ]
                }
            ]
        }
        response = requests.post(self.settings.slack_webhook, json=payload, timeout=10)
        response.raise_for_status()
