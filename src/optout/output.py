"""
Output utilities using Rich for the optout command line.
Rendered arguments go to stdout untouched; everything else is styled.
"""

import json

from rich.console import Console
from rich.markup import escape

# Global console instances
console = Console()
err_console = Console(stderr=True, soft_wrap=True)


class OutputManager:
    """Prints rendered arguments and styled diagnostics."""

    def print_argv(self, argv: list):
        """Print an argv list as a JSON array on stdout."""
        console.out(json.dumps(argv), highlight=False)

    def print_shell(self, command: str):
        """Print a shell fragment on stdout, verbatim."""
        console.out(command, highlight=False)

    def print_using_schema(self, schema_name: str, option_count: int):
        err_console.print(
            f"Using schema: [bold]{escape(schema_name)}[/bold] "
            f"([dim]{option_count} options[/dim])"
        )

    def print_error(self, message: str):
        """Print error message with red X."""
        err_console.print(f"[red]✗ {escape(message)}[/red]")

    def print_option_error(self, key: str, message: str):
        """Print a rejected option, highlighting its key."""
        err_console.print(
            f"[red]✗ Option [bold red]{escape(str(key))}[/bold red] rejected:[/red] "
            f"{escape(message)}"
        )

    def print_usage_error(self, prog: str, message: str):
        """Print argument parsing error with rich formatting."""
        err_console.print(f"[red]✗ Error:[/red] {escape(message)}")
        err_console.print(f"\nFor help, use: [bold magenta]{prog} --help[/bold magenta]")


# Global output manager instance
output = OutputManager()
