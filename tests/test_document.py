"""
Tests for the lossless document tree.
"""

from sam_smith import document
from sam_smith.document import Node

TEXT = """Parameters:
  EnvA:
    Type: String

Resources:
  First:
    Type: AWS::Logs::LogGroup

  Second:
    Type: AWS::Logs::LogGroup
    Properties:
      Layers:
        - !Ref one
        - !Ref two

Outputs:
  Url:
    Value: x
"""


class TestParseRender:
    """Tests for parsing and rendering."""

    def test_round_trip_is_exact(self):
        assert document.render(document.parse(TEXT)) == TEXT

    def test_blank_runs_collapse(self):
        text = "A:\n  b: 1\n\n\n\nC:\n  d: 2\n\n"
        assert document.render(document.parse(text)) == "A:\n  b: 1\n\nC:\n  d: 2\n"

    def test_structure(self):
        root = document.parse(TEXT)
        resources = root.child("Resources")
        assert [node.key for node in resources.entries()] == ["First", "Second"]
        layers = resources.child("Second").child("Properties").child("Layers")
        assert [node.item for node in layers.entries()] == ["!Ref one", "!Ref two"]

    def test_value_strips_quotes(self):
        assert Node("    Type: 'AWS::DynamoDB::Table'").value == "AWS::DynamoDB::Table"
        assert Node("    Events:").value is None

    def test_set_value_keeps_indent(self):
        node = Node("      Timeout: 60")
        node.set_value("30")
        assert node.text == "      Timeout: 30"

    def test_parse_block_drops_blanks(self):
        nodes = document.parse_block("\n  A:\n    Type: x\n  B:\n    Type: y\n")
        assert [node.key for node in nodes] == ["A", "B"]
        assert all(node.parent is None for node in nodes)


class TestInsertRemove:
    """Tests for blank-line handling during edits."""

    def test_remove_middle_resource_keeps_separators(self):
        root = document.parse(TEXT)
        document.remove(root.child("Resources").child("First"))
        assert document.render(root) == TEXT.replace(
            "  First:\n    Type: AWS::Logs::LogGroup\n\n", ""
        )

    def test_remove_last_resource_keeps_separator_before_next_section(self):
        root = document.parse(TEXT)
        document.remove(root.child("Resources").child("Second"))
        rendered = document.render(root)
        assert "    Type: AWS::Logs::LogGroup\n\nOutputs:" in rendered

    def test_separated_insert_adds_blank_lines(self):
        root = document.parse(TEXT)
        resources = root.child("Resources")
        node = document.parse_block("  Third:\n    Type: AWS::Logs::LogGroup")[0]
        document.insert(resources, 1, node, separated=True)
        rendered = document.render(root)
        assert "  First:\n    Type: AWS::Logs::LogGroup\n\n  Third:\n" in rendered
        assert "  Third:\n    Type: AWS::Logs::LogGroup\n\n  Second:\n" in rendered

    def test_plain_insert_inherits_trailing_blank(self):
        root = document.parse(TEXT)
        layers = root.child("Resources").child("Second").child("Properties").child("Layers")
        document.append(layers, Node("        - !Ref three"))
        rendered = document.render(root)
        assert "        - !Ref two\n        - !Ref three\n\nOutputs:" in rendered

    def test_insert_then_remove_restores_text(self):
        root = document.parse(TEXT)
        layers = root.child("Resources").child("Second").child("Properties").child("Layers")
        item = Node("        - !Ref three")
        document.append(layers, item)
        document.remove(item)
        assert document.render(root) == TEXT
