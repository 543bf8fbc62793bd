"""
邮件通知服务 (Mail Notification Service)

通过 SMTP（aiosmtplib）发送邮箱验证和密码重置邮件。
Mailer 由进程入口显式创建并注入，不使用模块级的全局连接对象。
发送失败会抛出异常；业务流程只通过副作用分发器调用它，失败不会阻塞触发它的操作。

Sends email verification and password reset mails over SMTP (aiosmtplib).
The Mailer is constructed explicitly by the process entry point and injected; there
is no module-level transport. Transport errors raise; business flows only reach the
mailer through the side-effect dispatcher, so a failure never blocks the operation.
"""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Mailer:
    """SMTP 邮件客户端 (SMTP mail client)"""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_ssl: bool = True,
        sender: Optional[str] = None,
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.sender = sender or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_ssl=settings.smtp_ssl,
            sender=settings.mail_from,
        )

    def build_message(self, to: str, subject: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    async def send_mail(self, to: str, subject: str, html: str) -> None:
        """发送一封 HTML 邮件，传输错误直接抛出 (Send one HTML mail; transport errors propagate)"""
        kwargs = {
            "hostname": self.host,
            "port": self.port,
            "timeout": self.timeout,
        }
        if self.username:
            kwargs["username"] = self.username
            kwargs["password"] = self.password
        if self.use_ssl:
            kwargs["use_tls"] = True
        else:
            kwargs["start_tls"] = True

        await aiosmtplib.send(self.build_message(to, subject, html), **kwargs)
        logger.info("Mail '%s' sent to %s", subject, to)


# ---------------------------------------------------------------------------
# 邮件模板 (Mail Templates)
# ---------------------------------------------------------------------------

_TOKEN_MAIL = """
<div style="font-family: Arial, sans-serif; max-width: 500px; margin: auto; border: 1px solid #eee; padding: 24px; border-radius: 8px;">
  <h2 style="color: {color};">{title}</h2>
  <p>{intro}</p>
  <pre style="display: inline-block; background: {color}; color: #fff; padding: 12px 24px; border-radius: 4px; font-size: 2em; margin: 16px 0;">{token}</pre>
  <p style="color: #888; font-size: 0.9em;">{footer}</p>
</div>
"""

VERIFICATION_SUBJECT = "Verify your email"
RESET_SUBJECT = "Reset your password"


def verification_email_html(token: str) -> str:
    return _TOKEN_MAIL.format(
        color="#4CAF50",
        title="Welcome to Feedback App!",
        intro="Thank you for registering. Please verify your email by copying the token and pasting it in the app:",
        token=token,
        footer="If you did not request this, please ignore this email.",
    )


def reset_email_html(token: str) -> str:
    return _TOKEN_MAIL.format(
        color="#2196F3",
        title="Password Reset Request",
        intro="We received a request to reset your password. Copy the token and paste it in the app to choose a new password:",
        token=token,
        footer="If you did not request this, you can safely ignore this email.",
    )
