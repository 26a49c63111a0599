from __future__ import annotations

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet

from nettriage.core.models import Verdict


PRIMARY = colors.HexColor("#0A1628")
SECONDARY = colors.HexColor("#2E5BFF")
HEALTHY = colors.HexColor("#12B76A")
WARNING = colors.HexColor("#F79009")
CRITICAL = colors.HexColor("#F04438")
NEUTRAL_BG = colors.HexColor("#F5F6F8")

# Link-level verdicts mean the endpoint is effectively offline.
_VERDICT_COLORS = {
    Verdict.OK: HEALTHY,
    Verdict.NO_DEFAULT_GATEWAY: CRITICAL,
    Verdict.GATEWAY_UNREACHABLE: CRITICAL,
    Verdict.UPSTREAM_OR_OUTBOUND_BLOCK: CRITICAL,
    Verdict.DNS_RESOLUTION_ISSUE: WARNING,
    Verdict.INTERNAL_DNS_RESOLUTION_ISSUE: WARNING,
    Verdict.SEE_ISSUES: WARNING,
}


def verdict_color(verdict: Verdict) -> colors.Color:
    return _VERDICT_COLORS.get(verdict, WARNING)


def get_report_styles() -> dict:
    """Return the named ParagraphStyle map used by the PDF report."""
    stylesheet = getSampleStyleSheet()
    return {
        "Title": ParagraphStyle(
            "Title",
            parent=stylesheet["Title"],
            fontName="Times-Bold",
            fontSize=22,
            leading=26,
            textColor=PRIMARY,
            alignment=TA_CENTER,
        ),
        "Heading2": ParagraphStyle(
            "Heading2",
            parent=stylesheet["Heading2"],
            fontName="Times-Roman",
            fontSize=14,
            leading=18,
            textColor=PRIMARY,
            spaceAfter=6,
        ),
        "BodyText": ParagraphStyle(
            "BodyText",
            parent=stylesheet["BodyText"],
            fontName="Helvetica",
            fontSize=10,
            leading=13,
            spaceAfter=4,
        ),
        "Verdict": ParagraphStyle(
            "Verdict",
            parent=stylesheet["BodyText"],
            fontName="Helvetica-Bold",
            fontSize=16,
            leading=20,
            textColor=colors.white,
            alignment=TA_CENTER,
        ),
        "TableBody": ParagraphStyle(
            "TableBody",
            parent=stylesheet["BodyText"],
            fontName="Helvetica",
            fontSize=9,
            leading=11,
        ),
    }
