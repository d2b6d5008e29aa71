"""
Tests for the line primitives.
"""

from sam_smith.operations.lambdas import add_lambda
from sam_smith.operations.tables import create_table
from sam_smith.scanner import (
    Span,
    block_end,
    indent_of,
    locate_resource,
    locate_sub_block,
    resource_spans,
    section_span,
    value_of,
)

LINES = [
    "Resources:",
    "  FnA:",
    "    Type: AWS::Serverless::Function",
    "    Properties:",
    "      Events:",
    "        event1:",
    "          Type: Api",
    "",
    "  FnB:",
    "    Type: AWS::Serverless::Function",
    "Outputs:",
    "  Url:",
    "    Value: x",
]


class TestBlockEnd:
    """Tests for the indentation fence."""

    def test_stops_at_sibling(self):
        assert block_end(LINES, 1) == 8

    def test_blank_lines_stay_inside(self):
        assert block_end(LINES, 5) == 8

    def test_section_runs_to_next_top_level_key(self):
        assert block_end(LINES, 0) == 10

    def test_respects_limit(self):
        assert block_end(LINES, 11, 12) == 12

    def test_indent_of(self):
        assert indent_of("    Type: Api") == 4
        assert indent_of("Resources:") == 0


class TestResourceLocator:
    """Tests for locating sections, resources and sub-blocks."""

    def test_section_span(self):
        assert section_span(LINES, "Resources") == Span(0, 10)
        assert section_span(LINES, "Outputs") == Span(10, 13)
        assert section_span(LINES, "Parameters") is None

    def test_resource_spans(self):
        assert resource_spans(LINES) == [("FnA", Span(1, 8)), ("FnB", Span(8, 10))]

    def test_generated_spans_are_disjoint_and_ordered(self, project, template_text):
        add_lambda(project, "lambda2", env_vars=["A1"])
        create_table(project, "orders", "pk")
        lines = template_text().split("\n")
        spans = resource_spans(lines)
        resources_span = section_span(lines, "Resources")

        assert len(spans) == 10
        assert spans[0][1].start == resources_span.start + 1
        assert spans[-1][1].end == resources_span.end
        for (_, span), (_, following) in zip(spans, spans[1:]):
            assert span.start < span.end == following.start
        for name, span in spans:
            assert locate_resource(lines, name) == span
            assert lines[span.start] == f"  {name}:"

    def test_locate_resource(self):
        assert locate_resource(LINES, "FnB") == Span(8, 10)
        assert locate_resource(LINES, "Url") is None

    def test_locate_sub_block(self):
        assert locate_sub_block(LINES, 1, 8, "Events") == Span(4, 8)
        assert locate_sub_block(LINES, 8, 10, "Events") is None

    def test_sub_block_needs_exact_key(self):
        lines = ["  Fn:", "    EventsExtra: 1", "    Events:", "      e: 1"]
        assert locate_sub_block(lines, 0, 4, "Events") == Span(2, 4)

    def test_value_of_strips_quotes(self):
        assert value_of("    Type: 'AWS::DynamoDB::Table'") == "AWS::DynamoDB::Table"
        assert value_of("    Method: get") == "get"
