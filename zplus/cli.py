"""
Flask CLI commands for administering the sensitive-word list.

Usage:
    flask words list                          # Print one word per line
    flask words add 垃圾广告                   # Add one word
    flask words remove 垃圾广告                # Remove one word
    flask words add-batch spam scam "fake news"
    flask words clear --yes                   # Empty the list
    flask words export --output words.json    # Write the list as a JSON array
    flask words import words.json             # Replace the list from a file
    flask moderate "some user text"           # Show filtered text and matches
"""

from __future__ import annotations

import click
from flask.cli import AppGroup, with_appcontext

words_cli = AppGroup("words", help="Manage the sensitive-word list.")


def _get_filter():
    from zplus.services.moderation import get_filter
    return get_filter()


def _finish(result) -> None:
    """Echo a result message; exit 1 if the operation failed."""
    if result.success:
        click.echo(result.message)
        return
    click.echo(f"Error: {result.message}", err=True)
    raise SystemExit(1)


@words_cli.command("list")
def list_words_command() -> None:
    """Print the current word list."""
    words = _get_filter().list_words()
    for word in words:
        click.echo(word)
    click.echo(f"\n{len(words)} word(s)", err=True)


@words_cli.command("add")
@click.argument("word")
def add_word_command(word: str) -> None:
    """Add WORD to the list."""
    _finish(_get_filter().add_word(word))


@words_cli.command("remove")
@click.argument("word")
def remove_word_command(word: str) -> None:
    """Remove WORD from the list (exact match)."""
    _finish(_get_filter().remove_word(word))


@words_cli.command("add-batch")
@click.argument("words", nargs=-1, required=True)
def add_batch_command(words: tuple[str, ...]) -> None:
    """Add several WORDS; blanks and duplicates are skipped."""
    result = _get_filter().add_words_batch(words)
    click.echo(result.message)
    for word in result.skipped_words:
        click.echo(f"  skipped: {word!r}")


@words_cli.command("clear")
@click.option("--yes", is_flag=True, default=False,
              help="Actually clear the list. Without this flag, only counts words (dry run).")
def clear_command(yes: bool) -> None:
    """Remove every word from the list."""
    moderation = _get_filter()
    if not yes:
        click.echo(f"Would remove {len(moderation.list_words())} word(s). Use --yes to clear.")
        return
    _finish(moderation.clear_words())


@words_cli.command("export")
@click.option("--output", "-o", type=click.File("w", encoding="utf-8"), default="-",
              help="File to write (default: stdout).")
def export_command(output) -> None:
    """Write the list as a JSON array."""
    output.write(_get_filter().export_words())
    output.write("\n")


@words_cli.command("import")
@click.argument("source", type=click.File("r", encoding="utf-8"))
def import_command(source) -> None:
    """Replace the list with the JSON array in SOURCE ('-' for stdin)."""
    _finish(_get_filter().import_words(source.read()))


@click.command("moderate")
@click.argument("text")
@click.option("--replacement", default=None, help="Replacement token (default: MODERATION_REPLACEMENT).")
@with_appcontext
def moderate_command(text: str, replacement: str | None) -> None:
    """Check TEXT against the word list and print the filtered result."""
    outcome = _get_filter().moderate(text, replacement)
    click.echo(outcome.filtered_text)
    if outcome.matched:
        click.echo(f"Found: {', '.join(outcome.found_words)}", err=True)
    else:
        click.echo("No sensitive words found.", err=True)
