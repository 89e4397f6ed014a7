"""
rpnc - Postfix Compiler Command-Line Interface
==============================================

This module implements the command-line interface for the rpnc front
end. It reads a program from a file, compiles it and writes the postfix
output (with any Errors block) to a file or stdout.

Usage Examples
--------------
Basic compilation (writes prog.rpn):
    $ rpnc prog.txt

With output file:
    $ rpnc prog.txt -o out.rpn

To stdout:
    $ rpnc prog.txt -o -

Fail the build when diagnostics were recorded:
    $ rpnc --strict prog.txt

Verbose mode:
    $ rpnc -v prog.txt
"""

from dataclasses import replace
import logging
from pathlib import Path
from typing import Optional

import click

from rpnc import __version__
from rpnc.compiler import Compiler, CompilerOptions, Associativity
from rpnc.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def validate_label_prefix(ctx, param, value: Optional[str]) -> Optional[str]:
    """Reject label prefixes CompilerOptions would refuse."""
    if value is not None:
        try:
            CompilerOptions(label_prefix=value)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, allow_dash=True),
    help="Output file, or '-' for stdout (default: input.rpn)",
)
@click.option(
    "--left-assoc",
    is_flag=True,
    help="Group '+'/'-' chains left to right (a - b - c -> a b - c -)",
)
@click.option(
    "--emit-return",
    is_flag=True,
    help="Emit a 'return' instruction for the return statement",
)
@click.option(
    "--label-prefix",
    type=str,
    default=None,
    callback=validate_label_prefix,
    help="Prefix for generated loop labels (default: m)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 when any diagnostics were recorded",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="rpnc")
def main(
    input_file: Path,
    output: Optional[str],
    left_assoc: bool,
    emit_return: bool,
    label_prefix: Optional[str],
    strict: bool,
    verbose: bool,
) -> None:
    """
    Compile a program to postfix code.

    INPUT_FILE is the program source to compile.

    The output lists one instruction per line: the declaration record
    (DECL), assignments, label definitions (DEFL) and branches (BRL).
    Diagnostics are appended after an "Errors:" header.

    \b
    Examples:
        rpnc prog.txt                # Outputs prog.rpn
        rpnc prog.txt -o out.rpn     # Specify output file
        rpnc prog.txt -o -           # Print to stdout
        rpnc --strict prog.txt       # Exit 1 on diagnostics

    \b
    Environment:
        RPNC_ASSOCIATIVITY   left | right
        RPNC_EMIT_RETURN     1 | 0
        RPNC_LABEL_PREFIX    label prefix
    Command-line flags override the environment.
    """
    setup_logging(verbose)

    try:
        options = CompilerOptions.from_env()
        overrides = {}
        if left_assoc:
            overrides["associativity"] = Associativity.LEFT
        if emit_return:
            overrides["emit_return"] = True
        if label_prefix is not None:
            overrides["label_prefix"] = label_prefix
        options = replace(options, **overrides)
        logger.debug(f"Options: {options}")

        if verbose:
            click.echo(f"Compiling {input_file}...", err=True)
            click.echo(f"Associativity: {options.associativity.value}", err=True)

        result = Compiler(options).compile_file(input_file)

        if output == "-":
            click.echo(result.output, nl=False)
        else:
            destination = Path(output) if output else input_file.with_suffix(".rpn")
            result.write_to(destination)
            if verbose:
                click.echo(f"Wrote {len(result.instructions)} instructions to {destination}", err=True)
            click.echo(f"Compiled {input_file} -> {destination}", err=True)

        if not result.success:
            count = len(result.errors)
            click.echo(f"{count} {'error' if count == 1 else 'errors'} recorded", err=True)
            if strict:
                result.raise_if_errors()

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
