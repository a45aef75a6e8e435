"""Statement buffering and fragment building."""

from .buffer import StatementBuffer
from .writer import FragmentWriter, format_statement

__all__ = ["FragmentWriter", "StatementBuffer", "format_statement"]
