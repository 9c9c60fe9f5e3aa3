import logging
from pathlib import Path
from typing import Dict, List, Optional

from langchain_core.tools import BaseTool, tool


logger = logging.getLogger(__name__)


class Workspace:
    """
    A directory the document team reads and writes.

    Every file name is resolved inside `root`; names that escape it raise
    ValueError.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, file_name: str) -> Path:
        root = self.root.resolve()
        path = (root / file_name).resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"File name {file_name!r} points outside the workspace")
        return path

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def list_files(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def describe_files(self) -> str:
        files = self.list_files()
        if not files:
            return "No files written."
        listing = "\n".join(f" - {name}" for name in files)
        return f"\nBelow are files your team has written to the directory:\n{listing}"

    def write_document(self, content: str, file_name: str) -> str:
        self.ensure()
        path = self._path(file_name)
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote document %s", path)
        return f"Document saved to {file_name}"

    def read_document(
        self,
        file_name: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> str:
        lines = self._path(file_name).read_text(encoding="utf-8").splitlines()
        return "\n".join(lines[start or 0 : end])

    def edit_document(self, file_name: str, inserts: Dict[int, str]) -> str:
        """Insert text at 1-indexed line numbers."""
        path = self._path(file_name)
        lines = path.read_text(encoding="utf-8").splitlines()
        for line_number, text in sorted(inserts.items()):
            if line_number < 1 or line_number > len(lines) + 1:
                return f"Error: Line number {line_number} is out of range."
            lines.insert(line_number - 1, text)
        path.write_text("\n".join(lines), encoding="utf-8")
        logger.info("Edited document %s (%s insert(s))", path, len(inserts))
        return f"Document edited and saved to {file_name}"

    def create_outline(self, points: List[str], file_name: str) -> str:
        self.ensure()
        content = "\n".join(f"{i}. {point}" for i, point in enumerate(points, start=1))
        self._path(file_name).write_text(content, encoding="utf-8")
        logger.info("Wrote outline %s", file_name)
        return f"Outline saved to {file_name}"


def make_document_tools(workspace: Workspace) -> Dict[str, BaseTool]:
    """Expose a workspace as langchain tools, keyed by tool name."""

    @tool
    def write_document(content: str, file_name: str) -> str:
        """Create and save a text document."""
        return workspace.write_document(content, file_name)

    @tool
    def read_document(file_name: str, start: Optional[int] = None, end: Optional[int] = None) -> str:
        """Read the specified document, optionally between line offsets."""
        return workspace.read_document(file_name, start, end)

    @tool
    def edit_document(file_name: str, inserts: Dict[int, str]) -> str:
        """Edit a document by inserting text at specific 1-indexed line numbers."""
        return workspace.edit_document(file_name, inserts)

    @tool
    def create_outline(points: List[str], file_name: str) -> str:
        """Create and save an outline."""
        return workspace.create_outline(points, file_name)

    tools = [write_document, read_document, edit_document, create_outline]
    return {t.name: t for t in tools}


__all__ = ["Workspace", "make_document_tools"]
