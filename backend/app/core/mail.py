import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any, Dict, Optional

import resend
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from app.core.config import ResendConfig, SMTPConfig

logger = logging.getLogger("reviewportal.mail")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None


class EmailService:
    """
    Best-effort email transport for workflow notifications and co-author invitations.

    中文注释:
    - SMTP 优先；只配置了 Resend 时走 Resend；都没配置时只打日志（本地/测试），返回 False。
    - 不重试、不抛异常：返回值表示是否发出，失败由调用方记日志，不影响稿件状态。
    - 同步实现，调用方用 asyncio.to_thread 放到线程里执行。
    """

    _FROM_ENV = object()

    def __init__(self, *, smtp_config: Any = _FROM_ENV, resend_config: Any = _FROM_ENV):
        # 显式传 None 表示禁用该通道（单测常用）
        self.smtp_config: Optional[SMTPConfig] = (
            SMTPConfig.from_env() if smtp_config is self._FROM_ENV else smtp_config
        )
        self.resend_config: Optional[ResendConfig] = (
            ResendConfig.from_env() if resend_config is self._FROM_ENV else resend_config
        )
        if self.resend_config:
            resend.api_key = self.resend_config.api_key

        self._templates = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )

    def is_configured(self) -> bool:
        return self.smtp_config is not None or self.resend_config is not None

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        return self._templates.get_template(template_name).render(**context)

    def _send_smtp(self, cfg: SMTPConfig, email: OutgoingEmail) -> None:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = email.subject
        mime["From"] = cfg.from_email
        mime["To"] = email.to
        mime.attach(MIMEText(email.text, "plain", "utf-8"))
        if email.html:
            mime.attach(MIMEText(email.html, "html", "utf-8"))

        with smtplib.SMTP(cfg.host, cfg.port) as server:
            if cfg.use_starttls:
                server.starttls()
            if cfg.user and cfg.password:
                server.login(cfg.user, cfg.password)
            server.sendmail(cfg.from_email, [email.to], mime.as_string())

    def _send_resend(self, cfg: ResendConfig, email: OutgoingEmail) -> None:
        params: Dict[str, Any] = {"from": cfg.sender, "to": [email.to], "subject": email.subject, "text": email.text}
        if email.html:
            params["html"] = email.html
        resend.Emails.send(params)

    def send_email(self, *, to_email: str, subject: str, text_body: str, html_body: Optional[str] = None) -> bool:
        email = OutgoingEmail(to=to_email, subject=subject, text=text_body, html=html_body)
        if self.smtp_config is not None:
            channel, send = "SMTP", lambda: self._send_smtp(self.smtp_config, email)
        elif self.resend_config is not None:
            channel, send = "Resend", lambda: self._send_resend(self.resend_config, email)
        else:
            logger.info("[Email:dev] not configured, would send to %s: %s", to_email, subject)
            return False

        try:
            send()
        except Exception as e:
            logger.warning("[Email:%s] send to %s failed: %s", channel, to_email, e)
            return False
        logger.info("[Email:%s] sent to %s: %s", channel, to_email, subject)
        return True

    def send_template_email(self, *, to_email: str, subject: str, template_name: str, context: Dict[str, Any]) -> bool:
        try:
            text = self.render_template(template_name, context)
        except TemplateError as e:
            logger.warning("[Email] template %s failed to render: %s", template_name, e)
            return False
        return self.send_email(to_email=to_email, subject=subject, text_body=text)


email_service = EmailService()
