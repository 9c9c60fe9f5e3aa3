import pytest

from utils.workspace import Workspace, make_document_tools


def test_write_read_and_list(tmp_path) -> None:
    workspace = Workspace(tmp_path / "ws")
    assert workspace.list_files() == []
    assert workspace.describe_files() == "No files written."

    workspace.write_document("line 1\nline 2\nline 3", "report.md")

    assert workspace.list_files() == ["report.md"]
    assert "report.md" in workspace.describe_files()
    assert workspace.read_document("report.md", start=1, end=2) == "line 2"


def test_edit_document_inserts_at_line_numbers(tmp_path) -> None:
    workspace = Workspace(tmp_path)
    workspace.write_document("a\nc", "doc.txt")

    workspace.edit_document("doc.txt", {2: "b"})

    assert workspace.read_document("doc.txt") == "a\nb\nc"
    assert "out of range" in workspace.edit_document("doc.txt", {10: "z"})


def test_create_outline_numbers_points(tmp_path) -> None:
    workspace = Workspace(tmp_path)
    workspace.create_outline(["Intro", "Process"], "outline.md")
    assert workspace.read_document("outline.md") == "1. Intro\n2. Process"


def test_paths_cannot_escape_workspace(tmp_path) -> None:
    workspace = Workspace(tmp_path / "ws")
    with pytest.raises(ValueError):
        workspace.write_document("x", "../escape.txt")


def test_document_tools_wrap_workspace(tmp_path) -> None:
    workspace = Workspace(tmp_path)
    tools = make_document_tools(workspace)

    assert set(tools) == {"write_document", "read_document", "edit_document", "create_outline"}
    tools["write_document"].invoke({"content": "hello", "file_name": "a.txt"})
    assert tools["read_document"].invoke({"file_name": "a.txt"}) == "hello"
