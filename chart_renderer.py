"""
Chart rendering for the architect completion report.

Draws the per-person completion counts as a stacked vertical bar chart with
reportlab and assembles the PDF report. Each person in the PDF table links
to the inventory filtered to that person, the printable counterpart of
clicking a bar.
"""

import logging
from typing import Callable, List, Optional
from xml.sax.saxutils import escape

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.legends import Legend
from reportlab.graphics.shapes import Drawing, String
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from accessibility_colors import get_accessible_text_color
from completion_levels import color_hex_for
from constants import ChartLayout
from performance_timing import timed_function
from series_projector import ChartData

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Architect Subscriptions by Completion"


def _plot_area(width: int, height: int):
    """Return (x, y, plot_width, plot_height) of the bar area in a drawing."""
    x = ChartLayout.MARGIN_LEFT
    y = ChartLayout.MARGIN_BOTTOM
    plot_width = max(10, width - ChartLayout.MARGIN_LEFT - ChartLayout.MARGIN_RIGHT)
    plot_height = max(10, height - ChartLayout.MARGIN_BOTTOM - ChartLayout.MARGIN_TOP)
    return x, y, plot_width, plot_height


def _value_step(max_total: int) -> int:
    return max(1, int(round(max_total / 5.0)))


def make_completion_bar_chart(
    chart_data: ChartData,
    title: str = DEFAULT_TITLE,
    width: int = ChartLayout.DEFAULT_WIDTH,
    height: int = ChartLayout.DEFAULT_HEIGHT,
    show_labels: bool = True
) -> Drawing:
    """Create a stacked vertical bar chart of completion counts per person.

    Args:
        chart_data: Person labels and one series per completion level
        title: Chart title displayed at the top center
        width: Chart width in points
        height: Chart height in points
        show_labels: If True, print counts inside segments tall enough
            to hold them

    Returns:
        reportlab Drawing containing the chart and its legend
    """
    drawing = Drawing(width, height)
    drawing.add(String(width / 2, height - 15, title,
                       fontName='Helvetica-Bold', fontSize=ChartLayout.TITLE_FONT_SIZE,
                       textAnchor='middle'))

    if chart_data.is_empty:
        drawing.add(String(width / 2, height / 2, "No data",
                           fontName='Helvetica', fontSize=10, textAnchor='middle',
                           fillColor=colors.grey))
        return drawing

    plot_x, plot_y, plot_width, plot_height = _plot_area(width, height)
    totals = chart_data.totals()
    max_total = max(max(totals), 1)
    value_max = max_total * 1.1

    chart = VerticalBarChart()
    chart.x = plot_x
    chart.y = plot_y
    chart.width = plot_width
    chart.height = plot_height
    chart.data = [list(series.values) for series in chart_data.datasets]
    chart.categoryAxis.style = 'stacked'
    chart.categoryAxis.categoryNames = list(chart_data.labels)
    chart.barSpacing = 0
    chart.groupSpacing = 4
    chart.valueAxis.valueMin = 0
    chart.valueAxis.valueMax = value_max
    chart.valueAxis.valueStep = _value_step(max_total)
    chart.valueAxis.labels.fontSize = ChartLayout.AXIS_FONT_SIZE

    for i, series in enumerate(chart_data.datasets):
        chart.bars[i].fillColor = series.color
        chart.bars[i].strokeColor = colors.white
        chart.bars[i].strokeWidth = 0.5

    chart.categoryAxis.labels.fontSize = ChartLayout.AXIS_FONT_SIZE
    chart.categoryAxis.labels.boxAnchor = 'ne' if len(chart_data.labels) > ChartLayout.ANGLED_LABEL_THRESHOLD else 'n'
    chart.categoryAxis.labels.angle = 45 if len(chart_data.labels) > ChartLayout.ANGLED_LABEL_THRESHOLD else 0
    chart.categoryAxis.labels.dy = -4

    drawing.add(chart)

    if show_labels:
        _add_segment_labels(drawing, chart_data, plot_x, plot_y, plot_width, plot_height, value_max)

    legend = Legend()
    legend.x = plot_x + plot_width + 20
    legend.y = plot_y + plot_height
    legend.alignment = 'right'
    legend.fontSize = ChartLayout.LEGEND_FONT_SIZE
    legend.columnMaximum = 10
    legend.colorNamePairs = [(series.color, series.label) for series in chart_data.datasets]
    drawing.add(legend)

    return drawing


def _add_segment_labels(drawing: Drawing, chart_data: ChartData, plot_x: float, plot_y: float,
                        plot_width: float, plot_height: float, value_max: float) -> None:
    """Write each non-zero count in the middle of its stacked segment."""
    category_width = plot_width / float(len(chart_data.labels))
    for person_index in range(len(chart_data.labels)):
        bar_center = plot_x + (person_index + 0.5) * category_width
        running = 0
        for series in chart_data.datasets:
            value = series.values[person_index]
            if value <= 0:
                continue
            segment_height = value / value_max * plot_height
            segment_bottom = plot_y + running / value_max * plot_height
            running += value
            if segment_height < ChartLayout.MIN_LABEL_SEGMENT_HEIGHT:
                continue
            text_color = colors.HexColor(get_accessible_text_color(color_hex_for(series.level)))
            drawing.add(String(
                bar_center,
                segment_bottom + segment_height / 2 - 2,
                str(value),
                fontName='Helvetica-Bold',
                fontSize=ChartLayout.SEGMENT_FONT_SIZE,
                textAnchor='middle',
                fillColor=text_color
            ))


def _person_table(chart_data: ChartData, link_for: Optional[Callable[[int], str]]) -> Table:
    styles = getSampleStyleSheet()
    header = ["#", "Person"] + [series.label for series in chart_data.datasets] + ["Total"]
    rows: List[list] = [header]
    totals = chart_data.totals()

    for index, name in enumerate(chart_data.labels):
        display = escape(name or "")
        if link_for is not None:
            display = f'<link href="{escape(link_for(index))}" color="blue">{display}</link>'
        rows.append(
            [str(index), Paragraph(display, styles["BodyText"])]
            + [str(series.values[index]) for series in chart_data.datasets]
            + [str(totals[index])]
        )

    table = Table(rows, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#1F3A5F")),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor("#B0B7C3")),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F4F7")]),
    ]))
    return table


@timed_function("pdf_generation.completion_report")
def build_report_pdf(
    chart_data: ChartData,
    output_path: str,
    title: str = DEFAULT_TITLE,
    link_for: Optional[Callable[[int], str]] = None
) -> str:
    """Write the completion report PDF.

    Args:
        chart_data: Chart labels and series to render
        output_path: Destination file path
        title: Report title
        link_for: Optional callable mapping a person index to the inventory
            URL filtered to that person

    Returns:
        The output path
    """
    styles = getSampleStyleSheet()
    page_size = landscape(A4)
    doc = SimpleDocTemplate(
        output_path,
        pagesize=page_size,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )

    story = [Paragraph(escape(title), styles["Title"]), Spacer(1, 4 * mm)]
    chart_width = int(page_size[0] - 30 * mm)
    story.append(make_completion_bar_chart(chart_data, title="", width=chart_width))
    story.append(Spacer(1, 6 * mm))

    if chart_data.is_empty:
        story.append(Paragraph("No architect subscriptions match the current filters.", styles["BodyText"]))
    else:
        story.append(_person_table(chart_data, link_for))

    doc.build(story)
    logger.info(f"Report written to {output_path}")
    return output_path
