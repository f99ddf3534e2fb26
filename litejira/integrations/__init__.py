"""External service clients.

Each client implements ``BaseIntegration`` and degrades to a mock/unconfigured
mode when no real credentials are present.
"""

from litejira.integrations.ai_client import AIClient
from litejira.integrations.base import BaseIntegration
from litejira.integrations.sendgrid import EmailClient

__all__ = [
    "AIClient",
    "BaseIntegration",
    "EmailClient",
]
