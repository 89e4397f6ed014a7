"""
rpnc Command-Line Interface
===========================

- **rpnc**: compile a program file to postfix code

The tool is a Click-based CLI application with help text and consistent
exit codes (see rpnc.cli.errors).
"""

__all__ = ["rpnc"]
