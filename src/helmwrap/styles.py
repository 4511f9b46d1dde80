"""Custom styling for questionary prompts.

This module provides a consistent style for the interactive
confirmation prompts of the CLI.
"""

from questionary import Style

# ANSI 256 colors for broad terminal compatibility
PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#af87ff bold"),  # Purple question mark
        ("question", "bold"),
        ("answer", "fg:#ff87d7 bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

QMARK = "? "
