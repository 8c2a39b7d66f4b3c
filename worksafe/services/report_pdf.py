from __future__ import annotations

import base64
import re
from datetime import datetime
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from worksafe.core.logger import get_logger
from worksafe.schemas.safety import AnalysisResult
from worksafe.services.renderer import count_by_level

logger = get_logger(__name__)

PAGE_MARGIN = 20 * mm
FOOTER_HEIGHT = 34 * mm
MAX_PHOTO_HEIGHT = 60 * mm

FOOTER_TEXT = "Generated by Work Safety Analyzer - AI-Powered Workplace Safety Analysis"

LEVEL_COLORS = {
    "high": {"bg": colors.HexColor("#FEF2F2"), "text": colors.HexColor("#B91C1C")},
    "medium": {"bg": colors.HexColor("#FFFBEB"), "text": colors.HexColor("#D97706")},
    "low": {"bg": colors.HexColor("#F0FDF4"), "text": colors.HexColor("#16A34A")},
}


class ReportGenerationError(RuntimeError):
    pass


def report_filename(photo_name: str, analysis_date: datetime) -> str:
    stem = re.sub(r"\.[^/.]+$", "", photo_name or "uploaded-photo") or "uploaded-photo"
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", stem)
    return f"safety-analysis-{stem}-{analysis_date:%Y-%m-%d}.pdf"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("" if count == 1 else "s")


def _decode_data_uri(value: str) -> bytes:
    _, _, payload = value.partition("base64,")
    return base64.b64decode(payload or value, validate=False)


class _NumberedCanvas(pdf_canvas.Canvas):
    """Canvas that defers footers until the total page count is known"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total_pages)
            super().showPage()
        super().save()

    def _draw_footer(self, total_pages: int) -> None:
        page_width, _ = self._pagesize
        self.saveState()
        self.setStrokeColor(colors.HexColor("#C8C8C8"))
        self.line(PAGE_MARGIN, 30 * mm, page_width - PAGE_MARGIN, 30 * mm)
        self.setFillColor(colors.HexColor("#646464"))
        self.setFont("Helvetica", 9)
        self.drawString(PAGE_MARGIN, 20 * mm, FOOTER_TEXT)
        self.drawString(
            PAGE_MARGIN, 15 * mm, f"Report generated on {datetime.now():%Y-%m-%d}"
        )
        self.drawRightString(
            page_width - PAGE_MARGIN,
            10 * mm,
            f"Page {self._pageNumber} of {total_pages}",
        )
        self.restoreState()


class SafetyReportPdfBuilder:
    TITLE = "Work Safety Analysis Report"
    SECTION_TITLES = (
        "Analysis Details",
        "Analyzed Photo",
        "Executive Summary",
        "Detailed Risk Analysis",
    )
    NO_RISKS_TEXT = (
        "No safety risks were identified in this analysis. The workplace appears "
        "to meet basic safety standards based on the visible elements in the photo."
    )

    def __init__(self) -> None:
        styles = getSampleStyleSheet()
        self.banner_style = ParagraphStyle(
            "SafetyBanner",
            parent=styles["Heading1"],
            fontSize=22,
            leading=26,
            alignment=1,
            textColor=colors.white,
        )
        self.section_style = ParagraphStyle(
            "SafetySection",
            parent=styles["Heading2"],
            fontSize=16,
            leading=20,
            spaceBefore=12,
            spaceAfter=6,
        )
        self.text_style = ParagraphStyle(
            "SafetyText",
            parent=styles["BodyText"],
            fontSize=11,
            leading=15,
        )
        self.note_style = ParagraphStyle(
            "SafetyNote",
            parent=self.text_style,
            fontName="Helvetica-Oblique",
            textColor=colors.HexColor("#646464"),
        )
        self.risk_title_style = ParagraphStyle(
            "SafetyRiskTitle",
            parent=self.text_style,
            fontName="Helvetica-Bold",
            fontSize=13,
            leading=16,
        )

    def build_pdf(
        self,
        *,
        results: AnalysisResult,
        photo_name: str = "uploaded-photo",
        analysis_date: Optional[datetime] = None,
        photo_base64: Optional[str] = None,
    ) -> bytes:
        analysis_date = analysis_date or datetime.now()
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=PAGE_MARGIN,
            rightMargin=PAGE_MARGIN,
            topMargin=PAGE_MARGIN,
            bottomMargin=FOOTER_HEIGHT,
            pageCompression=0,
            title=self.TITLE,
        )
        content_width = doc.width

        story = [self._banner(content_width), Spacer(1, 8 * mm)]
        story.extend(self._details(results, photo_name, analysis_date, content_width))
        if photo_base64:
            story.extend(self._photo(photo_base64, content_width))
        story.extend(self._summary(results))
        story.extend(self._risk_details(results, content_width))

        try:
            doc.build(story, canvasmaker=_NumberedCanvas)
        except Exception as exc:
            logger.exception("Error generating PDF")
            raise ReportGenerationError("Failed to generate PDF report") from exc

        return buffer.getvalue()

    def _banner(self, width: float) -> Table:
        banner = Table([[Paragraph(self.TITLE, self.banner_style)]], colWidths=[width])
        banner.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#2563EB")),
                    ("TOPPADDING", (0, 0), (-1, -1), 12),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 12),
                ]
            )
        )
        return banner

    def _details(
        self,
        results: AnalysisResult,
        photo_name: str,
        analysis_date: datetime,
        width: float,
    ) -> list:
        rows = [
            [Paragraph(f"<b>{self.SECTION_TITLES[0]}</b>", self.text_style)],
            [Paragraph(f"Photo: {escape(photo_name)}", self.text_style)],
            [
                Paragraph(
                    f"Analysis Date: {analysis_date:%B %d, %Y %I:%M %p}",
                    self.text_style,
                )
            ],
            [
                Paragraph(
                    f"Total Risks Identified: {len(results.risks)}", self.text_style
                )
            ],
        ]
        table = Table(rows, colWidths=[width])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#F8FAFC")),
                    ("LEFTPADDING", (0, 0), (-1, -1), 8),
                    ("TOPPADDING", (0, 0), (-1, -1), 3),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ]
            )
        )
        return [table, Spacer(1, 6 * mm)]

    def _photo(self, photo_base64: str, width: float) -> list:
        flowables = [Paragraph(self.SECTION_TITLES[1], self.section_style)]
        try:
            data = _decode_data_uri(photo_base64)
            reader = ImageReader(BytesIO(data))
            reader.getRGBData()
            image_width, image_height = reader.getSize()
            scale = min(width / image_width, MAX_PHOTO_HEIGHT / image_height)
            flowables.append(
                Image(BytesIO(data), width=image_width * scale, height=image_height * scale)
            )
        except Exception as exc:
            logger.warning("Error adding image to PDF: %s", exc)
            flowables.append(
                Paragraph("Photo could not be embedded in this report.", self.note_style)
            )
        flowables.append(Spacer(1, 6 * mm))
        return flowables

    def _summary(self, results: AnalysisResult) -> list:
        counts = count_by_level(results)
        total = len(results.risks)
        lines = [
            f"This safety analysis identified {total} potential "
            f"risk{'' if total == 1 else 's'} in the workplace photo:",
            f"\u2022 {_plural(counts['high'], 'High Risk issue')} "
            "(immediate attention required)",
            f"\u2022 {_plural(counts['medium'], 'Medium Risk issue')} "
            "(should be addressed soon)",
            f"\u2022 {_plural(counts['low'], 'Low Risk issue')} "
            "(monitoring recommended)",
        ]
        if counts["high"] > 0:
            lines.append(
                "<b>URGENT:</b> High-risk issues require immediate action to prevent "
                "potential accidents or injuries."
            )
        else:
            lines.append(
                "Good news: No high-risk issues were identified in this analysis."
            )

        flowables = [Paragraph(self.SECTION_TITLES[2], self.section_style)]
        flowables.extend(Paragraph(line, self.text_style) for line in lines)
        return flowables

    def _risk_details(self, results: AnalysisResult, width: float) -> list:
        if not results.risks:
            return [Spacer(1, 4 * mm), Paragraph(self.NO_RISKS_TEXT, self.text_style)]

        flowables = [Paragraph(self.SECTION_TITLES[3], self.section_style)]
        for index, risk in enumerate(results.risks, start=1):
            level_colors = LEVEL_COLORS[risk.level]
            header_style = ParagraphStyle(
                f"SafetyRiskHeader{index}",
                parent=self.text_style,
                fontName="Helvetica-Bold",
                textColor=level_colors["text"],
            )
            block = Table(
                [
                    [
                        Paragraph(
                            f"Risk {index} - {risk.level.upper()} PRIORITY", header_style
                        )
                    ],
                    [Paragraph(escape(risk.title), self.risk_title_style)],
                    [
                        Paragraph(
                            f"Recommendation: {escape(risk.recommendation)}",
                            self.text_style,
                        )
                    ],
                ],
                colWidths=[width],
            )
            block.setStyle(
                TableStyle(
                    [
                        ("BACKGROUND", (0, 0), (-1, 0), level_colors["bg"]),
                        ("LEFTPADDING", (0, 0), (-1, -1), 6),
                        ("TOPPADDING", (0, 0), (-1, -1), 4),
                        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
                    ]
                )
            )
            flowables.extend([block, Spacer(1, 5 * mm)])
        return flowables
