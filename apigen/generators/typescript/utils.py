"""
Shared utilities for TypeScript generation.

Contains the indented code builder and JSDoc helpers used by the type
definition renderer, the client method emitter and the module assembler.
"""

from typing import List


class CodeBuilder:
    """Helper for building indented code with automatic indent management."""

    def __init__(self, indent_size: int = 4, indent_level: int = 0):
        self.lines = []
        self.indent_level = indent_level
        self.indent_size = indent_size

    def add_line(self, line: str = ""):
        """Add line with current indentation."""
        if line.strip():  # Only indent non-empty lines
            indented = " " * (self.indent_level * self.indent_size) + line
            self.lines.append(indented)
        else:
            self.lines.append("")

    def add_lines(self, lines: List[str]):
        """Add multiple lines."""
        for line in lines:
            self.add_line(line)

    def indent(self):
        """Increase indentation level."""
        self.indent_level += 1

    def dedent(self):
        """Decrease indentation level."""
        self.indent_level = max(0, self.indent_level - 1)

    def add_block(self, opening: str, closing: str = "}"):
        """Context manager for blocks like { ... }."""
        return BlockContext(self, opening, closing)

    def get_code(self) -> str:
        """Get final code string."""
        return "\n".join(self.lines)


class BlockContext:
    """Context manager for automatic block indentation."""

    def __init__(self, builder: CodeBuilder, opening: str, closing: str):
        self.builder = builder
        self.closing = closing
        self.builder.add_line(opening)
        self.builder.indent()

    def __enter__(self):
        return self.builder

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Dedent first, then add closing line
        self.builder.dedent()
        self.builder.add_line(self.closing)
        return None


def wrap_jsdoc(parts: List[str]) -> str:
    """Wrap JSDoc parts in proper comment syntax."""
    if not parts:
        return ""

    if len(parts) == 1:
        return f"/** {parts[0]} */"

    lines = ["/**"]
    for part in parts:
        if part == "":  # Empty line separator
            lines.append(" *")
        else:
            lines.append(f" * {part}")
    lines.append(" */")

    return "\n".join(lines)


def docstring_parts(text: str) -> List[str]:
    """Split a multi-line description into JSDoc parts, dropping outer blank lines."""
    lines = [line.strip() for line in text.strip().splitlines()]
    return [line.replace("*/", "*\\/") for line in lines]


def quote_string(value: str) -> str:
    """Render a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"
