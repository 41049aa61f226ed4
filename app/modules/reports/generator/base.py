"""
Base PDF report layout.

Pages are US letter in millimetres. Content is written top to bottom at a
vertical cursor ``y`` (the text baseline); ``check_page_break`` starts a new
page when the next block would run into the footer area. The running header
(pages 2+) and the company footer (every page) are drawn by ``ReportPDF``.
"""

import base64
import binascii
import logging
from datetime import date
from io import BytesIO
from typing import Any, Callable, Dict, Iterable, List, Optional

from fpdf import FPDF
from fpdf.enums import MethodReturnValue

logger = logging.getLogger(__name__)

MARGIN = 20
FOOTER_SPACE = 40
LINE_HEIGHT = 5
CONTINUATION_TOP = MARGIN + 15
BULLET = "·"

COMPANY_NAME = "HBS Consultants"
COMPANY_STREET = "368 Ashbury Way"
COMPANY_CITY = "Naples, FL 34110"
COMPANY_PHONE = "239.326.7846"
HEADER_TITLE = f"{COMPANY_NAME} Report"

DEFAULT_RECIPIENT = "Lee County Public Works"
DEFAULT_ATTENTION = "Building and Permit Services"
DEFAULT_RECIPIENT_ADDRESS = ["1500 Monroe St", "Fort Myers, FL 33901"]

LIMITATIONS_TEXT = (
    "Our observations are based upon nondestructive testing techniques. The conclusions, analysis, "
    "and opinions expressed herein have been prepared within a reasonable degree of engineering "
    "certainty. They are based on the results and interpretations of the testing and/or data "
    "collection activities performed at the site, the information available at the time the report "
    "was issued, and the education, training, knowledge, skill, and experience of the author and/or "
    "licensed professional engineer.\n\n"
    "The contents of this report are confidential and intended for the use of the Property Owner, "
    "and his representatives or clients. Contents of this report may also be privileged or otherwise "
    "protected by work product immunity or other legal rules. No liability is assumed for the misuse "
    "of this information by others and reserves the right to update this report should additional "
    "information become available."
)

_REPLACEMENTS = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "•": BULLET,
    "●": BULLET,
    "…": "...",
}


def clean_text(value: Any) -> str:
    """Core PDF fonts only cover latin-1."""
    text = "" if value is None else str(value)
    for src, dst in _REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def decode_image(data_uri: str) -> BytesIO:
    """Decode a ``data:image/...;base64,`` URI into an image stream."""
    if not data_uri or not data_uri.startswith("data:image"):
        raise ValueError("image is not a data:image URI")
    header, _, payload = data_uri.partition(",")
    if ";base64" not in header:
        raise ValueError("image data URI is not base64 encoded")
    try:
        return BytesIO(base64.b64decode(payload, validate=True))
    except binascii.Error as e:
        raise ValueError(f"invalid base64 image data: {e}") from e


def format_long_date(value: date, weekday: bool = False) -> str:
    text = f"{value:%B} {value.day}, {value.year}"
    return f"{value:%A}, {text}" if weekday else text


def yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def report_number(data: Dict[str, Any]) -> str:
    return str(data.get("report_sequence") or "1").zfill(3)


def item_number(data: Dict[str, Any], index: int) -> str:
    """Numbered finding, e.g. ``007.01``."""
    return f"{report_number(data)}.{index:02d}"


class ReportPDF(FPDF):
    """Letter page with the consultant running header and footer."""

    def __init__(self):
        super().__init__(orientation="P", unit="mm", format="letter")
        self.set_margins(MARGIN, MARGIN, MARGIN)
        self.set_auto_page_break(auto=False)

    def header(self):
        if self.page_no() > 1:
            width = self.w - 2 * MARGIN
            self.set_font("helvetica", "", 10)
            self.set_xy(MARGIN, 11)
            self.cell(width, 5, HEADER_TITLE, align="C")
            self.set_xy(MARGIN, 11)
            self.cell(width, 5, f"Page {self.page_no()}", align="R")

    def footer(self):
        width = self.w - 2 * MARGIN
        self.set_font("helvetica", "", 8)
        for text, align in ((COMPANY_NAME, "L"), (COMPANY_STREET, "C"), (COMPANY_CITY, "R")):
            self.set_xy(MARGIN, self.h - 18)
            self.cell(width, 4, text, align=align)
        self.set_xy(MARGIN, self.h - 11)
        self.cell(width, 4, COMPANY_PHONE, align="C")


class ReportGenerator:
    """Sequential report layout. Subclasses implement ``generate_specific_content``."""

    report_type: Optional[str] = None
    include_seal = False

    def __init__(self, report_date: Optional[date] = None):
        self.pdf = ReportPDF()
        self.pdf.add_page()
        self.page_width = self.pdf.w
        self.page_height = self.pdf.h
        self.margin = MARGIN
        self.content_width = self.page_width - 2 * MARGIN
        self.report_date = report_date or date.today()
        self.y = MARGIN

    @property
    def page_count(self) -> int:
        return self.pdf.page_no()

    def check_page_break(self, height: float) -> bool:
        if self.y + height > self.page_height - FOOTER_SPACE:
            self.pdf.add_page()
            self.y = CONTINUATION_TOP
            return True
        return False

    # Text primitives

    def set_font(self, style: str = "", size: int = 10):
        self.pdf.set_font("helvetica", style, size)

    def text(self, value: Any, x: Optional[float] = None, y: Optional[float] = None, align: str = "L"):
        value = clean_text(value)
        if not value:
            return
        x = self.margin if x is None else x
        if align == "C":
            x -= self.pdf.get_string_width(value) / 2
        elif align == "R":
            x -= self.pdf.get_string_width(value)
        self.pdf.text(x, self.y if y is None else y, value)

    def split_text(self, value: Any, width: float) -> List[str]:
        value = clean_text(value)
        if not value.strip():
            return []
        return self.pdf.multi_cell(width, LINE_HEIGHT, value, dry_run=True, output=MethodReturnValue.LINES)

    def add_paragraph(self, value: Any, indent: float = 0, spacing: float = 10):
        for line in self.split_text(value, self.content_width - indent):
            self.check_page_break(LINE_HEIGHT)
            self.text(line, self.margin + indent)
            self.y += LINE_HEIGHT
        self.y += spacing

    def add_section(self, title: str, content: Any, indent: float = 0, spacing: float = 5):
        self.check_page_break(20)
        self.set_font("B")
        self.text(f"{title}:")
        self.y += 8
        self.set_font()
        self.add_paragraph(content, indent=indent, spacing=spacing)

    def _add_list(self, items: Iterable[Any], marker: Callable[[int], str], indent: float):
        for index, item in enumerate(items, start=1):
            for line in self.split_text(f"{marker(index)} {item}", self.content_width - indent):
                self.check_page_break(LINE_HEIGHT)
                self.text(line, self.margin + indent)
                self.y += LINE_HEIGHT
        self.y += 5

    def add_bullet_list(self, items: Iterable[Any], indent: float = 5):
        self._add_list(items, lambda _: BULLET, indent)

    def add_numbered_list(self, items: Iterable[Any], indent: float = 5):
        self._add_list(items, lambda i: f"{i}.", indent)

    def add_image(self, data_uri: str, x: float, y: float, w: float, h: float, label: str = "image") -> bool:
        try:
            self.pdf.image(decode_image(data_uri), x=x, y=y, w=w, h=h)
            return True
        except Exception as e:
            logger.error(f"Failed to add {label}: {e}")
            return False

    # Report blocks

    def add_date_and_logo(self, data: Dict[str, Any]):
        if data.get("logo"):
            self.add_image(data["logo"], self.page_width - self.margin - 40, self.y, 40, 20, "logo")
        self.set_font()
        self.text(f"Date: {format_long_date(self.report_date)}")
        self.y += 15

    def add_recipient_section(self, data: Dict[str, Any]):
        self.set_font()
        self.text(data.get("recipient") or DEFAULT_RECIPIENT)
        self.y += 6
        self.text(f"Attn: {data.get('attention') or DEFAULT_ATTENTION}")
        self.y += 5
        for line in data.get("recipient_address") or DEFAULT_RECIPIENT_ADDRESS:
            self.text(f"     {line}")
            self.y += 5
        self.y += 5

    def add_reference_section(self, data: Dict[str, Any]):
        self.text(f"Ref: {data.get('reference') or data.get('project_name') or ''}")
        self.y += 5
        self.text(f"     {data.get('project_address') or ''}")
        self.y += 5
        if data.get("job_number"):
            self.text(f"     HBS Project Number: {data['job_number']}")
            self.y += 10
        else:
            self.y += 5

    def add_introduction(self, data: Dict[str, Any], scope_description: str):
        self.set_font()
        self.text(f"{data.get('attention') or 'Project Team'}:")
        self.y += 10
        self.add_paragraph(
            "Subsequent to your request, a review of the existing conditions was conducted by "
            f"{data.get('inspector_name') or 'the inspector of record'}, of "
            f"{data.get('company_name') or COMPANY_NAME} (HBS), at the above referenced property. "
            f"More specifically, the scope of this service assignment is to {scope_description}."
        )

    def add_signature_section(self, data: Dict[str, Any], include_seal: bool = False):
        self.check_page_break(40)
        self.set_font()
        self.text("Respectfully Submitted,")
        self.y += 15

        signature = data.get("digital_signature")
        if signature and self.add_image(signature, self.margin, self.y, 60, 20, "signature"):
            self.y += 25
        else:
            self.y += 20

        seal = data.get("digital_seal") or data.get("engineering_seal")
        if include_seal and seal:
            self.add_image(seal, self.margin + 70, self.y - 25, 40, 40, "engineering seal")

        suffix = ", P.E., S.I." if include_seal else ", P.E."
        lines = [f"{data.get('inspector_name') or ''}{suffix}"]
        if data.get("inspector_license"):
            lines.append(f"Florida License No. {data['inspector_license']}")
        lines.append(data.get("company_name") or COMPANY_NAME)
        if data.get("inspector_email"):
            lines.append(data["inspector_email"])
        for line in lines:
            self.text(line)
            self.y += 5
        self.y += 10

    def add_photos_section(self, data: Dict[str, Any]):
        photos = [p for p in data.get("photos") or [] if p and p.get("url")]
        if not photos:
            return

        self.pdf.add_page()
        self.y = self.margin + 25
        self.set_font("B", 12)
        self.text("Photo Documentation", self.page_width / 2, align="C")
        self.y += 20

        per_row = 2
        photo_width = (self.content_width - 10) / per_row
        photo_height = photo_width * 0.75
        x = self.margin
        placed = 0
        for index, photo in enumerate(photos, start=1):
            if placed and placed % per_row == 0:
                self.y += photo_height + 15
                x = self.margin
                self.check_page_break(photo_height + 20)
            if not self.add_image(photo["url"], x, self.y, photo_width, photo_height, f"photo {index}"):
                continue
            self.set_font(size=8)
            caption_y = self.y + photo_height + 5
            for line in self.split_text(photo.get("caption") or f"Photo {index}", photo_width):
                self.text(line, x + photo_width / 2, caption_y, align="C")
                caption_y += 4
            x += photo_width + 5
            placed += 1
        self.y += photo_height + 15
        self.set_font()

    def add_limitations(self):
        self.pdf.add_page()
        self.y = self.margin + 25
        self.set_font("B")
        self.text("Limitations")
        self.y += 10
        self.set_font()
        self.add_paragraph(LIMITATIONS_TEXT, spacing=0)

    def add_professional_opinion(self, opinion: str):
        self.check_page_break(20)
        self.set_font()
        self.add_paragraph(opinion)

    # Assembly

    def generate_base_report(self, data: Dict[str, Any]):
        self.add_date_and_logo(data)
        self.add_recipient_section(data)
        self.add_reference_section(data)

    def generate_specific_content(self, data: Dict[str, Any]):
        raise NotImplementedError("Report generators must implement generate_specific_content")

    def generate(self, data: Dict[str, Any]) -> bytes:
        self.generate_base_report(data)
        self.generate_specific_content(data)
        self.add_signature_section(data, include_seal=self.include_seal)
        self.add_photos_section(data)
        self.add_limitations()
        return self.output()

    def output(self) -> bytes:
        return bytes(self.pdf.output())
