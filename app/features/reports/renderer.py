"""
Report rendering: markdown -> HTML -> PDF.

The markdown converter only covers what the report template produces
(headings, bold, italic, paragraphs, line breaks, horizontal rules); it is
not a general-purpose converter.

PDF rendering first asks an external HTML-to-PDF service. If that fails for
any reason the report is drawn as plain text with reportlab instead, so a
PDF request always yields a downloadable document.
"""

import html
import io
import logging
import re
from typing import List, Optional

import httpx
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.core.tracing import traced
from app.shared.correlation import propagate_correlation_headers
from app.services.http_client import http_client_manager

logger = logging.getLogger("Plusnote.Reports.Renderer")

FALLBACK_FONT = "Helvetica"
FALLBACK_FONT_SIZE = 12
FALLBACK_LEADING = 15
FALLBACK_LEFT = 50
FALLBACK_TOP = 750
FALLBACK_BOTTOM = 50
FALLBACK_LINE_WIDTH = 80

_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
_RULE = re.compile(r"^\s*-{3,}\s*$")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*([^*\n]+?)\*")

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>
      body {{
        font-family: 'Segoe UI', system-ui, -apple-system, sans-serif;
        line-height: 1.6;
        max-width: 800px;
        margin: 0 auto;
        padding: 40px 20px;
        color: #333;
      }}
      h1, h2, h3 {{ color: #2563eb; border-bottom: 2px solid #e5e7eb; padding-bottom: 8px; }}
      h1 {{ font-size: 28px; margin-bottom: 30px; }}
      h2 {{ font-size: 22px; margin-top: 30px; margin-bottom: 15px; }}
      h3 {{ font-size: 18px; margin-top: 20px; margin-bottom: 10px; }}
      p {{ margin-bottom: 12px; }}
      strong {{ color: #1f2937; }}
      .header {{ text-align: center; margin-bottom: 40px; border-bottom: 3px solid #2563eb; padding-bottom: 20px; }}
      .logo {{ color: #2563eb; font-weight: bold; font-size: 16px; }}
    </style>
  </head>
  <body>
    <div class="header">
      <div class="logo">Plusnote - AI Health Journal</div>
    </div>
{body}
  </body>
</html>
"""


class PdfServiceError(Exception):
    """The external HTML-to-PDF service could not produce a document."""


def _inline(text: str) -> str:
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return _ITALIC.sub(r"<em>\1</em>", text)


def markdown_to_html(markdown: str) -> str:
    """Convert the report's markdown subset to an HTML fragment."""
    blocks: List[str] = []
    paragraph: List[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append("<p>" + "<br>".join(_inline(line) for line in paragraph) + "</p>")
            paragraph.clear()

    for raw_line in html.escape(markdown, quote=False).splitlines():
        line = raw_line.rstrip()
        heading = _HEADING.match(line)
        if heading:
            flush()
            level = len(heading.group(1))
            blocks.append(f"<h{level}>{_inline(heading.group(2).strip())}</h{level}>")
        elif _RULE.match(line):
            flush()
            blocks.append("<hr>")
        elif not line.strip():
            flush()
        else:
            paragraph.append(line.strip())
    flush()

    return "\n".join(blocks)


def build_html_document(body_html: str, title: str = "Health Report") -> str:
    """Wrap an HTML fragment in the styled standalone report page."""
    return HTML_TEMPLATE.format(title=html.escape(title), body=body_html)


def plain_text_lines(text: str, width: int = FALLBACK_LINE_WIDTH) -> List[str]:
    """Printable-ASCII lines truncated to ``width`` characters."""
    ascii_only = re.sub(r"[^\x20-\x7E\n]", "", text)
    return [line[:width] for line in ascii_only.split("\n")]


def render_fallback_pdf(text: str, title: str = "Health Report") -> bytes:
    """Draw the report as left-aligned plain text lines."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter, pdfVersion=(1, 4))
    pdf.setTitle(title)

    text_object = pdf.beginText(FALLBACK_LEFT, FALLBACK_TOP)
    text_object.setFont(FALLBACK_FONT, FALLBACK_FONT_SIZE)
    text_object.setLeading(FALLBACK_LEADING)

    for line in plain_text_lines(text):
        if text_object.getY() < FALLBACK_BOTTOM:
            pdf.drawText(text_object)
            pdf.showPage()
            text_object = pdf.beginText(FALLBACK_LEFT, FALLBACK_TOP)
            text_object.setFont(FALLBACK_FONT, FALLBACK_FONT_SIZE)
            text_object.setLeading(FALLBACK_LEADING)
        text_object.textLine(line)

    pdf.drawText(text_object)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class PdfRenderer:
    """Render report text to PDF bytes, never failing outright."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        user_id: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.service_url = service_url if service_url is not None else settings.PDF_SERVICE_URL
        self.user_id = user_id if user_id is not None else settings.PDF_SERVICE_USER_ID
        self.api_key = api_key if api_key is not None else settings.PDF_SERVICE_API_KEY
        self.timeout = timeout if timeout is not None else settings.PDF_TIMEOUT_SECONDS
        self._http_client = http_client

    async def render(self, report_text: str) -> bytes:
        document = build_html_document(markdown_to_html(report_text))
        with traced("report.render_pdf") as span:
            try:
                pdf_bytes = await self._render_remote(document)
                span.set_attribute("pdf.renderer", "service")
                logger.info("PDF rendered by external service", extra={"bytes": len(pdf_bytes)})
                return pdf_bytes
            except Exception:
                logger.warning("PDF generation failed, using fallback renderer", exc_info=True)

            span.set_attribute("pdf.renderer", "fallback")
            return render_fallback_pdf(report_text)

    async def _render_remote(self, document: str) -> bytes:
        if not self.service_url:
            raise PdfServiceError("PDF service not configured")

        client = self._http_client or await http_client_manager.get_client()
        auth = (self.user_id, self.api_key) if self.user_id and self.api_key else None

        response = await client.post(
            self.service_url,
            json={"html": document, "format": "pdf", "width": 800, "height": 1100},
            headers=propagate_correlation_headers({"Content-Type": "application/json"}),
            auth=auth,
            timeout=self.timeout,
        )
        if response.is_error:
            raise PdfServiceError(f"PDF service returned HTTP {response.status_code}")
        if not response.content.startswith(b"%PDF"):
            raise PdfServiceError("PDF service returned a non-PDF body")
        return response.content
