"""Tests for the stacked bar chart and the PDF report."""

import pytest
from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.legends import Legend
from reportlab.graphics.shapes import String

from chart_renderer import build_report_pdf, make_completion_bar_chart
from completion_aggregator import aggregate
from constants import ChartLayout
from series_projector import ChartData, ChartSeries, create_chart_data


@pytest.fixture
def chart_data(scenario_records):
    return create_chart_data(aggregate(scenario_records))


def contents_of_type(drawing, cls):
    return [item for item in drawing.contents if isinstance(item, cls)]


class TestMakeCompletionBarChart:

    def test_stacked_chart(self, chart_data):
        drawing = make_completion_bar_chart(chart_data, title="Architects")

        chart = contents_of_type(drawing, VerticalBarChart)[0]
        assert chart.categoryAxis.style == 'stacked'
        assert chart.categoryAxis.categoryNames == ["Alice", "Bob"]
        assert chart.data == [[2, 0], [0, 1]]
        assert chart.bars[0].fillColor is chart_data.datasets[0].color

    def test_legend_lists_levels(self, chart_data):
        drawing = make_completion_bar_chart(chart_data)

        legend = contents_of_type(drawing, Legend)[0]
        assert [label for _, label in legend.colorNamePairs] == ["<25% complete", "100% complete"]

    def test_title_drawn(self, chart_data):
        drawing = make_completion_bar_chart(chart_data, title="Architects")
        assert "Architects" in [s.text for s in contents_of_type(drawing, String)]

    def test_segment_labels_optional(self, chart_data):
        with_labels = make_completion_bar_chart(chart_data, title="t")
        without_labels = make_completion_bar_chart(chart_data, title="t", show_labels=False)

        texts = [s.text for s in contents_of_type(with_labels, String)]
        assert "2" in texts and "1" in texts
        assert [s.text for s in contents_of_type(without_labels, String)] == ["t"]

    def test_angled_labels_for_many_people(self):
        labels = [f"Person {i}" for i in range(ChartLayout.ANGLED_LABEL_THRESHOLD + 1)]
        data = ChartData(labels=labels, datasets=[ChartSeries(1, "<25% complete", [1] * len(labels))])

        chart = contents_of_type(make_completion_bar_chart(data), VerticalBarChart)[0]
        assert chart.categoryAxis.labels.angle == 45

    def test_empty_data_placeholder(self):
        drawing = make_completion_bar_chart(ChartData(labels=[], datasets=[]))

        assert contents_of_type(drawing, VerticalBarChart) == []
        assert "No data" in [s.text for s in contents_of_type(drawing, String)]


class TestBuildReportPdf:

    def test_writes_pdf(self, chart_data, tmp_path):
        output = tmp_path / "report.pdf"

        result = build_report_pdf(chart_data, str(output), link_for=lambda i: f"https://x/{i}")

        assert result == str(output)
        assert output.read_bytes().startswith(b"%PDF")

    def test_empty_report(self, tmp_path):
        output = tmp_path / "empty.pdf"
        build_report_pdf(ChartData(labels=[], datasets=[]), str(output))
        assert output.stat().st_size > 0
