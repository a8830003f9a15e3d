"""magsli パッケージ。MailGun の Webhook を Slack へ中継する。"""

__version__ = "0.1.0"

from .app import create_app  # noqa: E402
from .main import app, lambda_handler, run_local  # noqa: E402

__all__ = ["__version__", "create_app", "app", "lambda_handler", "run_local"]
