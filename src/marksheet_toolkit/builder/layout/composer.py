"""
Module: builder.layout.composer

Purpose:
    Compose the marksheet page description for one student. A pure,
    deterministic function of its inputs: equal inputs give equal
    descriptions, and no input record is modified.

    Sections, top to bottom: page frame, school header, session badge,
    title, student-info grid, scholastic table with grand total,
    co-scholastic table beside the final result box, verification QR,
    signature lines and footer. The logo watermark is painted last so it
    sits over the content.

Key Functions:
    - compose_marksheet(): Student + class + school + theme -> PageDescription

Dependencies:
    - reportlab.pdfbase.pdfmetrics: Text measurement
    - reportlab.lib.utils: Line wrapping
    - builder.results: DerivedResult for totals and grades

Used By:
    - builder.export.single: export_one()
    - builder.export.batch: BatchExporter
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from marksheet_toolkit.core.models import (
    ClassConfig,
    DerivedResult,
    Orientation,
    SchoolInfo,
    Student,
    ThemeConfig,
    normalize_theme,
)
from marksheet_toolkit.core.models.records import format_number
from marksheet_toolkit.builder.results import compute_result, format_percentage

from .config import LayoutConfig, page_size_mm, px_to_mm
from .models import (
    BoxElement,
    Element,
    ImageElement,
    LineElement,
    PageDescription,
    QrElement,
    TextElement,
)

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = LayoutConfig()

WHITE = "#ffffff"
TITLE_TEXT = "Progress Report Card"
SESSION_PREFIX = "Academic Session"
SIGNATURES = ("Class Teacher", "Principal")
FOOTER_LEFT = "Generated by AUMV"
FOOTER_RIGHT = "This document is computer generated."
MISSING_GRADE = "-"


def verification_payload(student: Student, result: DerivedResult) -> str:
    """Text encoded in the verification QR code."""
    return (
        f"Name:{student.name},Roll:{student.roll_no},"
        f"Result:{result.label},Pct:{format_percentage(result.percentage)}"
    )


def compose_marksheet(
    student: Student,
    class_config: ClassConfig,
    school: SchoolInfo,
    theme: Union[ThemeConfig, Mapping[str, Any], None],
    orientation: Union[Orientation, str],
    font_size_px: float = 18,
    result: Optional[DerivedResult] = None,
    *,
    config: LayoutConfig = DEFAULT_LAYOUT,
) -> PageDescription:
    """
    Compose the page description for one student's marksheet.

    Args:
        student: Student record
        class_config: The student's class
        school: School header information
        theme: Normalized theme (a raw theme dict is normalized here)
        orientation: Page orientation
        font_size_px: Base font size in CSS pixels
        result: Precomputed result (computed when omitted)
        config: Spacing and measurement settings

    Returns:
        PageDescription sized to the physical page, taller when the
        content overflows

    Raises:
        ValueError: If font_size_px is not positive or the margins leave
            no room for content

    Example:
        >>> desc = compose_marksheet(student, cls, school, theme, "portrait")
        >>> desc == compose_marksheet(student, cls, school, theme, "portrait")
        True
    """
    if font_size_px <= 0:
        raise ValueError(f"font_size_px must be positive: {font_size_px}")

    normalized = normalize_theme(theme)
    if result is None:
        result = compute_result(student, class_config)

    composer = _MarksheetComposer(
        student=student,
        class_config=class_config,
        school=school,
        theme=normalized,
        orientation=Orientation.parse(orientation),
        em=px_to_mm(font_size_px),
        result=result,
        config=config,
    )
    description = composer.compose()
    logger.debug(
        f"Composed marksheet for {student.name}: {len(description.elements)} elements, "
        f"{description.width_mm:.1f}x{description.height_mm:.1f}mm"
    )
    return description


@dataclass(frozen=True)
class _Cell:
    """Measured table cell text."""

    text: str
    size: float
    color: str
    bold: bool = False
    align: str = "center"


class _MarksheetComposer:
    """Single-use builder that walks the sections top to bottom."""

    def __init__(
        self,
        student: Student,
        class_config: ClassConfig,
        school: SchoolInfo,
        theme: ThemeConfig,
        orientation: Orientation,
        em: float,
        result: DerivedResult,
        config: LayoutConfig,
    ) -> None:
        self.student = student
        self.class_config = class_config
        self.school = school
        self.theme = theme
        self.orientation = orientation
        self.em = em
        self.result = result
        self.cfg = config
        self.elements: List[Element] = []

        self.page_width, self.page_height = page_size_mm(orientation)
        margins = theme.margins
        inset = px_to_mm(config.frame_inset_px)
        self.x0 = margins.left + inset
        self.width = self.page_width - margins.left - margins.right - 2 * inset
        if self.width <= 0:
            raise ValueError(
                f"Margins {margins.left}+{margins.right}mm leave no room on a "
                f"{self.page_width}mm page"
            )

    # ─────────────────────────────────────────────────────────────────────
    # Text helpers
    # ─────────────────────────────────────────────────────────────────────

    def _font(self, bold: bool) -> str:
        return self.cfg.sans_bold_font if bold else self.cfg.sans_font

    def _measure(self, text: str, size: float, bold: bool = False) -> float:
        return stringWidth(text, self._font(bold), size)

    def _wrap(self, text: str, size: float, width: float, bold: bool = False) -> List[str]:
        if not text:
            return []
        return simpleSplit(text, self._font(bold), size, max(width, size)) or [text]

    def _line_height(self, size: float) -> float:
        return size * self.cfg.line_height

    def _text_height(self, text: str, size: float, width: float, bold: bool = False) -> float:
        return self._line_height(size) * max(1, len(self._wrap(text, size, width, bold)))

    def _text(
        self,
        x: float,
        y: float,
        width: float,
        text: str,
        size: float,
        color: str,
        *,
        bold: bool = False,
        italic: bool = False,
        align: str = "left",
        line_height: Optional[float] = None,
    ) -> float:
        """Emit wrapped lines; returns the height used (one line minimum)."""
        lh = line_height if line_height is not None else self._line_height(size)
        lines = self._wrap(text, size, width, bold)
        for i, line in enumerate(lines):
            self.elements.append(
                TextElement(
                    x=x, y=y + i * lh, width=width, height=lh, text=line,
                    font_size=size, color=color, bold=bold, italic=italic, align=align,
                )
            )
        return lh * max(1, len(lines))

    def _tab(self, y: float, x: float, label: str, background: str) -> float:
        """Section tab above a table; returns its height."""
        size = 0.75 * self.em
        pad_x, pad_y = px_to_mm(16), px_to_mm(8)
        text = label.upper()
        width = self._measure(text, size, bold=True) + 2 * pad_x
        height = self._line_height(size) + 2 * pad_y
        self.elements.append(
            BoxElement(x=x, y=y, width=width, height=height, fill=background, radius=px_to_mm(8))
        )
        self._text(x, y + pad_y, width, text, size, WHITE, bold=True, align="center")
        return height

    # ─────────────────────────────────────────────────────────────────────
    # Sections
    # ─────────────────────────────────────────────────────────────────────

    def compose(self) -> PageDescription:
        margins = self.theme.margins
        inset = px_to_mm(self.cfg.frame_inset_px)

        y = margins.top + inset
        y = self._header(y)
        y = self._title(y)
        y = self._student_info(y)
        y = self._scholastic(y)
        y = self._co_scholastic_and_result(y)
        y = self._footer(y)

        height = max(self.page_height, y + inset + margins.bottom)
        if height > self.page_height:
            logger.debug(f"Content overflows page: {height:.1f}mm > {self.page_height}mm")

        content = self.elements
        self.elements = []
        self._frame(height)
        frame = self.elements
        self.elements = []
        self._watermark(height)

        return PageDescription(
            width_mm=self.page_width,
            height_mm=height,
            page_width_mm=self.page_width,
            page_height_mm=self.page_height,
            orientation=self.orientation,
            font_family=self.theme.font_family,
            background=WHITE,
            elements=tuple(frame + content + self.elements),
        )

    def _frame(self, height: float) -> None:
        """Double page border inside the margins."""
        margins = self.theme.margins
        color = self.theme.page_border_color
        outer = px_to_mm(self.cfg.outer_border_px)
        inner = px_to_mm(1)
        x = margins.left
        y = margins.top
        w = self.page_width - margins.left - margins.right
        h = height - margins.top - margins.bottom

        self.elements.append(
            BoxElement(
                x=x + outer / 2, y=y + outer / 2, width=w - outer, height=h - outer,
                stroke=color, stroke_width=outer,
            )
        )
        gap = outer + px_to_mm(self.cfg.border_gap_px)
        self.elements.append(
            BoxElement(
                x=x + gap + inner / 2, y=y + gap + inner / 2,
                width=w - 2 * gap - inner, height=h - 2 * gap - inner,
                stroke=color, stroke_width=inner,
            )
        )

    def _header(self, y: float) -> float:
        theme = self.theme
        school = self.school
        em = self.em

        name_size = theme.school_name_size * em
        address_size = 1.125 * em
        affiliation_size = 0.875 * em

        logo = px_to_mm(self.cfg.logo_px) if school.logo else 0.0
        gap = px_to_mm(24) if school.logo else 0.0
        text_width = max(self.width - logo - gap, em)

        name_lines = self._wrap(school.name.upper(), name_size, text_width, bold=True)
        address_lines = self._wrap(school.address, address_size, text_width)
        affiliation_lines = self._wrap(school.affiliation, affiliation_size, text_width)

        block_width = max(
            [self._measure(line, name_size, bold=True) for line in name_lines]
            + [self._measure(line, address_size) for line in address_lines]
            + [self._measure(line, affiliation_size) for line in affiliation_lines]
            + [0.0]
        )
        block_width = min(block_width, text_width)

        name_lh = 1.2 * name_size
        text_height = (
            name_lh * max(1, len(name_lines))
            + px_to_mm(4) + self._line_height(address_size) * max(1, len(address_lines))
            + px_to_mm(4) + self._line_height(affiliation_size) * max(1, len(affiliation_lines))
        )
        row_height = max(logo, text_height)

        align = theme.school_name_align
        if align == "right":
            logo_x = self.x0 + self.width - logo
            text_x, block_width = self.x0, text_width
        elif align == "left":
            logo_x = self.x0
            text_x, block_width = self.x0 + logo + gap, text_width
        else:
            group_width = logo + gap + block_width
            logo_x = self.x0 + (self.width - group_width) / 2
            text_x = logo_x + logo + gap

        if school.logo:
            self.elements.append(
                ImageElement(
                    x=logo_x, y=y + (row_height - logo) / 2, width=logo, height=logo,
                    source=school.logo, fit="contain",
                )
            )

        ty = y + (row_height - text_height) / 2
        ty += self._text(
            text_x, ty, block_width, school.name.upper(), name_size,
            theme.school_name_color, bold=True, align=align, line_height=name_lh,
        )
        ty += px_to_mm(4)
        ty += self._text(
            text_x, ty, block_width, school.address, address_size,
            theme.header_secondary_color, align=align,
        )
        ty += px_to_mm(4)
        self._text(
            text_x, ty, block_width, school.affiliation, affiliation_size,
            theme.header_secondary_color, italic=True, align=align,
        )

        y += row_height + px_to_mm(8) + px_to_mm(16)

        # Session badge
        badge_size = theme.session_badge_size * em
        badge_text = f"{SESSION_PREFIX}: {school.session}".upper()
        badge_width = min(self._measure(badge_text, badge_size, bold=True) + 2 * px_to_mm(32), self.width)
        badge_height = 1.2 * badge_size + 2 * px_to_mm(8)
        badge_x = self.x0 + (self.width - badge_width) / 2
        self.elements.append(
            BoxElement(
                x=badge_x, y=y, width=badge_width, height=badge_height,
                fill=theme.session_badge_bg, radius=badge_height / 2,
            )
        )
        self.elements.append(
            TextElement(
                x=badge_x, y=y, width=badge_width, height=badge_height, text=badge_text,
                font_size=badge_size, color=theme.session_badge_color, bold=True, align="center",
            )
        )
        y += badge_height + px_to_mm(16)

        rule = px_to_mm(2)
        self.elements.append(
            LineElement(
                x1=self.x0, y1=y + rule / 2, x2=self.x0 + self.width, y2=y + rule / 2,
                color=theme.page_border_color, width=rule,
            )
        )
        return y + rule + px_to_mm(24)

    def _title(self, y: float) -> float:
        size = 1.5 * self.em
        text = TITLE_TEXT.upper()
        height = self._text(
            self.x0, y, self.width, text, size, self.theme.school_name_color,
            bold=True, align="center",
        )
        text_width = min(self._measure(text, size, bold=True), self.width)
        center = self.x0 + self.width / 2
        rule = px_to_mm(4)
        underline_y = y + height + px_to_mm(4) + rule / 2
        self.elements.append(
            LineElement(
                x1=center - text_width / 2, y1=underline_y,
                x2=center + text_width / 2, y2=underline_y,
                color=self.theme.page_border_color, width=rule,
            )
        )
        return y + height + px_to_mm(4) + rule + px_to_mm(24)

    def _student_info(self, y: float) -> float:
        theme = self.theme
        student = self.student
        em = self.em

        columns = 4 if self.orientation is Orientation.LANDSCAPE else 2
        pad = px_to_mm(24)
        show_photo = self.class_config.enable_photo and bool(student.photo)
        photo_width = px_to_mm(self.cfg.photo_width_px) if show_photo else 0.0
        photo_height = px_to_mm(self.cfg.photo_height_px) if show_photo else 0.0
        photo_gap = px_to_mm(24) if show_photo else 0.0

        gap_x, gap_y = px_to_mm(48), px_to_mm(16)
        grid_width = self.width - 2 * pad - photo_width - photo_gap
        cell_width = max((grid_width - gap_x * (columns - 1)) / columns, em)
        label_width = min(px_to_mm(self.cfg.info_label_px), cell_width / 2)
        value_width = cell_width - label_width

        fields = [
            ("Student Name", student.name, 1.125, True),
            ("Class", self.class_config.class_name, 1.0, False),
            ("Roll Number", student.roll_no, 1.0, False),
            ("Gender", student.gender.value, 1.0, False),
        ]
        fields += [(name, student.info_value(name), 1.0, False) for name in self.class_config.extra_info_fields]

        label_size = 0.75 * em
        rows = [fields[i:i + columns] for i in range(0, len(fields), columns)]
        row_heights = []
        for row in rows:
            cell_heights = []
            for label, value, scale, _bold in row:
                label_h = self._text_height(label.upper(), label_size, label_width, bold=True)
                value_h = self._text_height(value, scale * em, value_width, bold=True)
                cell_heights.append(max(label_h, value_h) + px_to_mm(4))
            row_heights.append(max(cell_heights))

        grid_height = sum(row_heights) + gap_y * max(0, len(rows) - 1)
        inner_height = max(grid_height, photo_height)
        box_height = inner_height + 2 * pad

        self.elements.append(
            BoxElement(
                x=self.x0, y=y, width=self.width, height=box_height,
                fill=theme.student_info_bg, stroke=theme.table_border_color,
                stroke_width=px_to_mm(1), radius=px_to_mm(8),
            )
        )

        row_y = y + pad + (inner_height - grid_height) / 2
        for row, row_height in zip(rows, row_heights):
            for col, (label, value, scale, bold) in enumerate(row):
                cell_x = self.x0 + pad + col * (cell_width + gap_x)
                body = row_height - px_to_mm(4)
                label_h = self._text_height(label.upper(), label_size, label_width, bold=True)
                value_size = scale * em
                value_h = self._text_height(value, value_size, value_width, bold=True)
                self._text(
                    cell_x, row_y + (body - label_h) / 2, label_width, label.upper(),
                    label_size, theme.student_label_color, bold=True,
                )
                self._text(
                    cell_x + label_width, row_y + (body - value_h) / 2, value_width, value,
                    value_size, theme.student_value_color, bold=bold,
                )
                rule_y = row_y + row_height
                self.elements.append(
                    LineElement(
                        x1=cell_x, y1=rule_y, x2=cell_x + cell_width, y2=rule_y,
                        color=theme.table_border_color, width=px_to_mm(1),
                    )
                )
            row_y += row_height + gap_y

        if show_photo:
            photo_x = self.x0 + self.width - pad - photo_width
            photo_y = y + pad + (inner_height - photo_height) / 2
            self.elements.append(
                ImageElement(
                    x=photo_x, y=photo_y, width=photo_width, height=photo_height,
                    source=student.photo, fit="cover",
                )
            )
            self.elements.append(
                BoxElement(
                    x=photo_x, y=photo_y, width=photo_width, height=photo_height,
                    stroke=WHITE, stroke_width=px_to_mm(2), radius=px_to_mm(6),
                )
            )

        return y + box_height + px_to_mm(32)

    def _table_row(
        self,
        y: float,
        xs: List[float],
        widths: List[float],
        cells: List[_Cell],
        pad: float,
        background: Optional[str],
    ) -> float:
        """Emit one table row; returns its height."""
        heights = [
            self._text_height(cell.text, cell.size, w - 2 * pad, cell.bold)
            for cell, w in zip(cells, widths)
        ]
        row_height = max(heights) + 2 * pad
        if background:
            self.elements.append(
                BoxElement(x=xs[0], y=y, width=sum(widths), height=row_height, fill=background)
            )
        for cell, x, w, h in zip(cells, xs, widths, heights):
            if cell.text:
                self._text(
                    x + pad, y + (row_height - h) / 2, w - 2 * pad, cell.text,
                    cell.size, cell.color, bold=cell.bold, align=cell.align,
                )
        return row_height

    def _column_grid(self, x: float, widths: List[float]) -> List[float]:
        xs = []
        for w in widths:
            xs.append(x)
            x += w
        return xs

    def _scholastic(self, y: float) -> float:
        theme = self.theme
        em = self.em
        result = self.result

        y += self._tab(y, self.x0, "Scholastic Achievement", theme.page_border_color)

        exam_columns = self.class_config.exam_columns
        n = len(exam_columns)
        exam_share = min(0.25 * n, 0.7)
        rest = self.width * (1 - exam_share)
        widths = [rest * 0.5]
        for _ in exam_columns:
            widths.append(self.width * exam_share * 0.4 / n)
            widths.append(self.width * exam_share * 0.6 / n)
        widths += [rest * 0.25, rest * 0.25]
        xs = self._column_grid(self.x0, widths)

        pad = px_to_mm(12)
        top = y
        head_size = 0.75 * em
        body_size = 0.875 * em
        border = theme.table_border_color
        row_bounds: List[float] = []

        header = [_Cell("SUBJECT", head_size, theme.table_header_color, True, "left")]
        for column in exam_columns:
            header.append(_Cell("MM", head_size, theme.table_header_color, True))
            header.append(_Cell(column.name.upper(), head_size, theme.table_header_color, True))
        header.append(_Cell("TOTAL", head_size, theme.table_header_color, True))
        header.append(_Cell("GRADE", head_size, theme.table_header_color, True))
        y += self._table_row(y, xs, widths, header, pad, theme.table_header_bg)
        row_bounds.append(y)

        for idx, subject in enumerate(self.class_config.scholastic_subjects):
            subject_result = result.for_subject(subject.id)
            cells = [_Cell(subject.name, body_size, theme.student_value_color, True, "left")]
            for column in exam_columns:
                exam = subject.get_exam(column.exam_id)
                if exam is None:
                    cells += [_Cell("", body_size, theme.student_label_color), _Cell("", body_size, theme.student_value_color)]
                    continue
                obtained = subject_result.obtained_for(exam.id) if subject_result else 0.0
                cells.append(_Cell(format_number(exam.max_marks), body_size, theme.student_label_color, True))
                cells.append(_Cell(format_number(obtained or 0.0), body_size, theme.student_value_color))
            cells.append(_Cell(
                format_number(subject_result.obtained if subject_result else 0.0),
                body_size, theme.page_border_color, True,
            ))
            cells.append(_Cell(subject_result.grade if subject_result else "", body_size, theme.grade_color, True))
            background = theme.table_row_odd_bg if idx % 2 == 0 else theme.table_row_even_bg
            y += self._table_row(y, xs, widths, cells, pad, background)
            row_bounds.append(y)

        totals = [_Cell("GRAND TOTAL", body_size, WHITE, True, "right")]
        totals += [_Cell("", body_size, WHITE) for _ in range(2 * n)]
        totals.append(_Cell(
            f"{format_number(result.grand_total_obtained)} / {format_number(result.grand_total_max)}",
            1.125 * body_size, WHITE, True,
        ))
        totals.append(_Cell("", body_size, WHITE))
        grid_bottom = y
        y += self._table_row(y, xs, widths, totals, pad, theme.page_border_color)

        for x in xs[1:]:
            self.elements.append(
                LineElement(x1=x, y1=top, x2=x, y2=grid_bottom, color=border, width=px_to_mm(1))
            )
        for i, bound in enumerate(row_bounds):
            weight = px_to_mm(2) if i == 0 else px_to_mm(1)
            self.elements.append(
                LineElement(x1=self.x0, y1=bound, x2=self.x0 + self.width, y2=bound, color=border, width=weight)
            )
        self.elements.append(
            BoxElement(
                x=self.x0, y=top, width=self.width, height=y - top,
                stroke=border, stroke_width=px_to_mm(2), radius=px_to_mm(8),
            )
        )
        return y + px_to_mm(24)

    def _co_scholastic_and_result(self, y: float) -> float:
        gap = px_to_mm(32)
        result_width = min(px_to_mm(self.cfg.result_width_px), self.width * 0.4)
        co_width = self.width - gap - result_width

        co_height = self._co_scholastic(y, self.x0, co_width)
        result_height = self._result_box(y, self.x0 + co_width + gap, result_width)
        return y + max(co_height, result_height) + px_to_mm(8)

    def _co_scholastic(self, y: float, x: float, width: float) -> float:
        theme = self.theme
        em = self.em
        top = y
        y += self._tab(y, x, "Co-Scholastic Areas", theme.header_secondary_color)
        table_top = y

        grade_width = min(px_to_mm(96), width / 2)
        widths = [width - grade_width, grade_width]
        xs = self._column_grid(x, widths)
        pad = px_to_mm(8)
        border = theme.table_border_color

        header = [
            _Cell("ACTIVITY", 0.75 * em, theme.student_label_color, True, "left"),
            _Cell("GRADE", 0.75 * em, theme.student_label_color, True),
        ]
        y += self._table_row(y, xs, widths, header, pad, theme.table_row_even_bg)
        self.elements.append(LineElement(x1=x, y1=y, x2=x + width, y2=y, color=border, width=px_to_mm(1)))

        for idx, subject in enumerate(self.class_config.co_scholastic_subjects):
            grade = self.student.grade_for(subject.id) or MISSING_GRADE
            cells = [
                _Cell(subject.name, 0.875 * em, theme.student_value_color, False, "left"),
                _Cell(grade, 0.875 * em, theme.grade_color, True),
            ]
            background = theme.table_row_odd_bg if idx % 2 != 0 else theme.table_row_even_bg
            y += self._table_row(y, xs, widths, cells, pad, background)
            self.elements.append(LineElement(x1=x, y1=y, x2=x + width, y2=y, color=border, width=px_to_mm(1)))

        self.elements.append(
            BoxElement(
                x=x, y=table_top, width=width, height=y - table_top,
                stroke=border, stroke_width=px_to_mm(1), radius=px_to_mm(8),
            )
        )
        return y - top

    def _result_box(self, y: float, x: float, width: float) -> float:
        theme = self.theme
        em = self.em
        result = self.result
        scale = theme.result_content_scale

        tab_height = self._tab(y, x, "Final Result", theme.page_border_color)
        y += tab_height

        pad = px_to_mm(24)
        inner = width - 2 * pad
        label_size = 0.75 * em
        pct_size = 2.25 * scale * em
        status_size = 1.5 * scale * em
        status_color = theme.result_pass_color if result.passed else theme.result_fail_color
        pct_text = f"{format_percentage(result.percentage)}%"

        pill_pad_x, pill_pad_y = px_to_mm(16), px_to_mm(4)
        pill_width = min(self._measure(result.label, status_size, bold=True) + 2 * pill_pad_x, inner)
        pill_height = self._line_height(status_size) + 2 * pill_pad_y

        content_height = (
            self._line_height(label_size) + px_to_mm(4)
            + self._line_height(pct_size) + px_to_mm(4)
            + px_to_mm(1) + px_to_mm(8)
            + self._line_height(label_size) + px_to_mm(4)
            + pill_height
        )
        box_height = max(px_to_mm(self.cfg.result_min_height_px), content_height + 2 * pad)

        self.elements.append(
            BoxElement(
                x=x, y=y, width=width, height=box_height, fill=WHITE,
                stroke=theme.page_border_color, stroke_width=px_to_mm(2), radius=px_to_mm(8),
            )
        )

        cy = y + (box_height - content_height) / 2
        cy += self._text(x + pad, cy, inner, "PERCENTAGE", label_size, theme.student_label_color, align="center")
        cy += px_to_mm(4)
        self.elements.append(
            TextElement(
                x=x + pad, y=cy, width=inner, height=self._line_height(pct_size), text=pct_text,
                font_size=pct_size, color=theme.school_name_color, bold=True, align="center",
            )
        )
        cy += self._line_height(pct_size) + px_to_mm(4)
        self.elements.append(
            LineElement(
                x1=x + pad, y1=cy + px_to_mm(0.5), x2=x + pad + inner, y2=cy + px_to_mm(0.5),
                color=theme.table_border_color, width=px_to_mm(1),
            )
        )
        cy += px_to_mm(1) + px_to_mm(8)
        cy += self._text(x + pad, cy, inner, "STATUS", label_size, theme.student_label_color, align="center")
        cy += px_to_mm(4)

        pill_x = x + pad + (inner - pill_width) / 2
        self.elements.append(
            BoxElement(
                x=pill_x, y=cy, width=pill_width, height=pill_height,
                fill=status_color, fill_opacity=0x10 / 0xFF,
                stroke=status_color, stroke_width=px_to_mm(2), radius=px_to_mm(4),
            )
        )
        self.elements.append(
            TextElement(
                x=pill_x, y=cy, width=pill_width, height=pill_height, text=result.label,
                font_size=status_size, color=status_color, bold=True, align="center",
            )
        )
        return tab_height + box_height

    def _footer(self, y: float) -> float:
        theme = self.theme
        em = self.em
        y += px_to_mm(32)

        side_pad = px_to_mm(16)
        left = self.x0 + side_pad
        right = self.x0 + self.width - side_pad

        # Verification block
        qr_size = px_to_mm(self.cfg.qr_px)
        qr_pad = px_to_mm(4)
        frame = qr_size + 2 * qr_pad
        caption_size = 0.625 * em
        caption = "SCAN TO VERIFY"
        caption_height = self._line_height(caption_size)
        qr_block_width = max(frame, self._measure(caption, caption_size))
        qr_block_height = frame + px_to_mm(8) + caption_height

        # Signatures
        sig_size = 0.875 * em
        line_width = px_to_mm(self.cfg.signature_line_px)
        sig_gap = px_to_mm(128)
        available = right - left - qr_block_width - px_to_mm(16)
        if 2 * line_width + sig_gap > available:
            sig_gap = max(px_to_mm(16), available - 2 * line_width)
        sig_height = px_to_mm(2) + px_to_mm(8) + self._line_height(sig_size) + px_to_mm(8)

        row_height = max(qr_block_height, sig_height)

        qr_y = y + row_height - qr_block_height
        frame_x = left + (qr_block_width - frame) / 2
        self.elements.append(
            BoxElement(
                x=frame_x, y=qr_y, width=frame, height=frame, fill=WHITE,
                stroke=theme.table_border_color, stroke_width=px_to_mm(1), radius=px_to_mm(4),
            )
        )
        self.elements.append(
            QrElement(
                x=frame_x + qr_pad, y=qr_y + qr_pad, size=qr_size,
                payload=verification_payload(self.student, self.result),
            )
        )
        self._text(
            left, qr_y + frame + px_to_mm(8), qr_block_width, caption, caption_size,
            theme.student_label_color, align="center",
        )

        sig_y = y + row_height - sig_height
        sig_x = right - (2 * line_width + sig_gap)
        for label in SIGNATURES:
            rule = px_to_mm(2)
            self.elements.append(
                LineElement(
                    x1=sig_x, y1=sig_y + rule / 2, x2=sig_x + line_width, y2=sig_y + rule / 2,
                    color=theme.table_border_color, width=rule,
                )
            )
            self._text(
                sig_x, sig_y + rule + px_to_mm(8), line_width, label.upper(), sig_size,
                theme.header_secondary_color, bold=True, align="center",
            )
            sig_x += line_width + sig_gap

        y += row_height + px_to_mm(24)

        # Footer line
        self.elements.append(
            LineElement(
                x1=self.x0, y1=y, x2=self.x0 + self.width, y2=y,
                color=theme.table_border_color, width=px_to_mm(1),
            )
        )
        y += px_to_mm(12)
        footer_size = 0.625 * em
        half = self.width / 2
        self._text(self.x0, y, half, FOOTER_LEFT, footer_size, theme.student_label_color)
        height = self._text(
            self.x0 + half, y, half, FOOTER_RIGHT, footer_size,
            theme.student_label_color, align="right",
        )
        return y + height

    def _watermark(self, height: float) -> None:
        """Grayscale logo centered over the whole description."""
        if not self.school.logo:
            return
        size = self.page_width * self.cfg.watermark_ratio
        self.elements.append(
            ImageElement(
                x=(self.page_width - size) / 2,
                y=(height - size) / 2,
                width=size,
                height=size,
                source=self.school.logo,
                fit="contain",
                opacity=self.theme.watermark_opacity,
                grayscale=True,
            )
        )
