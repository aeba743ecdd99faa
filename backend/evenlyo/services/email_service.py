# backend/evenlyo/services/email_service.py
"""
Email rendering and delivery.

Templates are Jinja2 files under ``evenlyo/templates``. The console provider
renders the message and logs it instead of handing it to a mail API.
"""

from datetime import date, datetime
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import settings
from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def _currency(value: Union[int, float, None]) -> str:
    return f"€{float(value or 0):,.2f}"


def _format_date(value: Union[date, datetime, str], format_str: str = "%B %d, %Y") -> str:
    if isinstance(value, str):
        return value
    return value.strftime(format_str)


class EmailService:
    """Render Jinja2 email templates and deliver them through the configured provider."""

    def __init__(self, template_dir: Optional[Path] = None) -> None:
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = _currency
        self.env.filters["format_date"] = _format_date
        self.provider = settings.email_provider

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": settings.frontend_url,
            "support_email": settings.support_email,
        }

    def render_template(self, template_name: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render ``template_name`` with the common context plus ``context``.

        Raises:
            TemplateNotFound: If the template does not exist
        """
        full_context = self.get_common_context()
        full_context.update(context or {})
        try:
            return self.env.get_template(template_name).render(**full_context)
        except TemplateNotFound:
            logger.error(f"Email template not found: {template_name}")
            raise

    def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        *,
        tags: Optional[Sequence[str]] = None,
    ) -> bool:
        logger.info(
            f"[{self.provider}] email to {to_email}: {subject}",
            extra={"to_email": to_email, "tags": list(tags or []), "length": len(body_html)},
        )
        return True

    def send_template(
        self,
        to_email: str,
        subject: str,
        template_name: str,
        context: Mapping[str, Any],
        *,
        tags: Optional[Sequence[str]] = None,
    ) -> bool:
        body = self.render_template(template_name, context)
        return self.send_email(to_email, subject, body, tags=tags)
