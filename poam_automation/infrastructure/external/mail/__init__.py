"""Mail gateways for the send_email action."""

from poam_automation.infrastructure.external.mail.http_gateway import HttpMailGateway
from poam_automation.infrastructure.external.mail.log_gateway import LogOnlyMailGateway

__all__ = ["HttpMailGateway", "LogOnlyMailGateway"]
