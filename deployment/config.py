import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _optional_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


@dataclass
class Settings:
    rpc_url: str = "http://localhost:8545"
    private_key: Optional[str] = None
    deployer_account: Optional[str] = None
    chain_id: int = 31337
    network: str = "development"
    artifacts_dir: str = "artifacts/contracts"
    deployment_file: str = "deployment.json"
    gas: Optional[int] = None
    log_file: str = "deployment.log"

    # Alerting
    slack_webhook: Optional[str] = None
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    notification_email: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, loading a .env file first"""
        load_dotenv()
        return cls(
            rpc_url=os.getenv("RPC_URL", "http://localhost:8545"),
            private_key=os.getenv("PRIVATE_KEY") or None,
            deployer_account=os.getenv("DEPLOYER_ACCOUNT") or None,
            chain_id=int(os.getenv("CHAIN_ID", "31337")),
            network=os.getenv("DEPLOY_NETWORK", "development"),
            artifacts_dir=os.getenv("ARTIFACTS_DIR", "artifacts/contracts"),
            deployment_file=os.getenv("DEPLOYMENT_FILE", "deployment.json"),
            gas=_optional_int(os.getenv("DEPLOY_GAS")),
            log_file=os.getenv("LOG_FILE", "deployment.log"),
            slack_webhook=os.getenv("SLACK_WEBHOOK") or None,
            smtp_server=os.getenv("SMTP_SERVER", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_username=os.getenv("SMTP_USERNAME") or None,
            smtp_password=os.getenv("SMTP_PASSWORD") or None,
            notification_email=os.getenv("NOTIFICATION_EMAIL") or None,
        )
