"""
Response exports: Excel workbook and paginated PDF table.
"""
import io
import logging
import re
import textwrap
from typing import Dict, List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
from matplotlib.backends.backend_pdf import PdfPages  # noqa: E402
from matplotlib.lines import Line2D  # noqa: E402

from survey_site.exceptions import ValidationFailed  # noqa: E402
from survey_site.models import ResponseRecord  # noqa: E402

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data to export."
SUBMITTED_FORMAT = "%Y-%m-%d %H:%M"

# PDF page geometry, inches (A4 portrait)
PAGE_SIZE = (8.27, 11.69)
MARGIN = 0.6
LINE_HEIGHT = 0.22
ROW_PADDING = 0.08
HEADER_HEIGHT = LINE_HEIGHT + 2 * ROW_PADDING
TITLE_HEIGHT = 0.5
PDF_COLUMNS = [("ID", 0.12, 8), ("User", 0.44, 34), ("Submitted", 0.44, 30)]


def format_submitted(record: ResponseRecord) -> str:
    return record.submitted_at.strftime(SUBMITTED_FORMAT) if record.submitted_at else ""


def export_filename(title: Optional[str], extension: str) -> str:
    base = re.sub(r'[\\/:*?"<>|]+', "_", (title or "").strip()) or "Survey"
    return f"{base}_Responses.{extension}"


def responses_frame(records: Sequence[ResponseRecord]) -> pd.DataFrame:
    """One row per response: ID, User, Submitted, then Q{questionId} per answered question"""
    rows: List[Dict[str, object]] = []
    question_ids: List[int] = []
    for record in records:
        row: Dict[str, object] = {
            "ID": record.id,
            "User": record.display_name,
            "Submitted": format_submitted(record),
        }
        for answer in record.answers:
            if answer.question_id not in question_ids:
                question_ids.append(answer.question_id)
            value = answer.rating_value if answer.rating_value is not None else answer.answer_text
            row[f"Q{answer.question_id}"] = value
        rows.append(row)
    columns = ["ID", "User", "Submitted"] + [f"Q{qid}" for qid in sorted(question_ids)]
    return pd.DataFrame(rows, columns=columns)


def export_excel(records: Sequence[ResponseRecord]) -> bytes:
    if not records:
        raise ValidationFailed([NO_DATA_MESSAGE])
    df = responses_frame(records)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Responses", index=False)
    logger.info("Exported %d responses to Excel", len(df))
    return buffer.getvalue()


def paginate_rows(row_heights: Sequence[float], page_height: float, header_height: float) -> List[List[int]]:
    """Split rows into pages.

    Every page carries the header. Rows are placed greedily and never split;
    a row that does not fit even on an empty page gets a page of its own.

    Args:
        row_heights: height of each row, same unit as page_height
        page_height: usable height of one page
        header_height: height of the repeated header

    Returns:
        list of pages, each a list of row indices
    """
    pages: List[List[int]] = []
    current: List[int] = []
    used = header_height
    for index, height in enumerate(row_heights):
        if current and used + height > page_height:
            pages.append(current)
            current, used = [], header_height
        current.append(index)
        used += height
    if current:
        pages.append(current)
    return pages


def _wrap_cells(record: ResponseRecord) -> List[List[str]]:
    values = [str(record.id if record.id is not None else ""), record.display_name, format_submitted(record)]
    return [textwrap.wrap(value, width) or [""] for value, (_, _, width) in zip(values, PDF_COLUMNS)]


def _row_height(cells: List[List[str]]) -> float:
    return max(len(lines) for lines in cells) * LINE_HEIGHT + 2 * ROW_PADDING


def _draw_row(fig, top: float, cells: List[List[str]], bold: bool = False) -> float:
    width, height = PAGE_SIZE
    usable = width - 2 * MARGIN
    row_height = _row_height(cells)
    x = MARGIN
    for (_, fraction, _), lines in zip(PDF_COLUMNS, cells):
        for i, line in enumerate(lines):
            y = top - ROW_PADDING - (i + 0.75) * LINE_HEIGHT
            fig.text(x / width, y / height, line, fontsize=9,
                     fontweight="bold" if bold else "normal", va="baseline")
        x += usable * fraction
    bottom = top - row_height
    fig.add_artist(Line2D([MARGIN / width, (width - MARGIN) / width],
                          [bottom / height, bottom / height],
                          color="#cccccc", linewidth=0.5, transform=fig.transFigure))
    return bottom


def export_pdf(records: Sequence[ResponseRecord], title: Optional[str] = None) -> bytes:
    """Table of ID / User / Submitted, header repeated on every page"""
    if not records:
        raise ValidationFailed([NO_DATA_MESSAGE])

    wrapped = [_wrap_cells(r) for r in records]
    heights = [_row_height(cells) for cells in wrapped]
    usable_height = PAGE_SIZE[1] - 2 * MARGIN - TITLE_HEIGHT
    pages = paginate_rows(heights, usable_height, HEADER_HEIGHT)
    header = [[name] for name, _, _ in PDF_COLUMNS]
    heading = f"{title or 'Survey'} - Responses"

    buffer = io.BytesIO()
    with PdfPages(buffer) as pdf:
        for number, page in enumerate(pages, start=1):
            fig = plt.figure(figsize=PAGE_SIZE)
            try:
                top = PAGE_SIZE[1] - MARGIN
                fig.text(MARGIN / PAGE_SIZE[0], (top - 0.3) / PAGE_SIZE[1], heading,
                         fontsize=13, fontweight="bold")
                fig.text(1 - MARGIN / PAGE_SIZE[0], MARGIN / 2 / PAGE_SIZE[1],
                         f"Page {number} of {len(pages)}", fontsize=8, ha="right")
                top = _draw_row(fig, top - TITLE_HEIGHT, header, bold=True)
                for index in page:
                    top = _draw_row(fig, top, wrapped[index])
                pdf.savefig(fig)
            finally:
                plt.close(fig)
    logger.info("Exported %d responses to PDF (%d pages)", len(records), len(pages))
    return buffer.getvalue()
