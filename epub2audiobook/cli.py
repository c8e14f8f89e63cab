"""
Command-line interface for epub2audiobook.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .cleaner import TextCleaner, normalize_text
from .converter import BookConverter
from .custom_rules import DEFAULT_RULES_FILE, load_rules
from .models import ChapterRecord, TitleCandidateSet
from .parser import EPUBParser
from .titles import TOC_MATCH_STRATEGIES, TitleResolver

console = Console()


def setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def display_chapters_table(chapters: list[ChapterRecord]):
    """Display converted chapters in a table format."""
    table = Table(title="🎧 Chapters", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=6)
    table.add_column("Section", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("Source", justify="center", style="green")
    table.add_column("File")

    for chapter in chapters:
        table.add_row(
            f"{chapter.ordinal:04}",
            chapter.id,
            chapter.display_title,
            chapter.title_source.value,
            chapter.output_basename,
        )

    console.print(table)


def display_candidates_table(
    chapters: list[ChapterRecord], candidates: TitleCandidateSet
):
    """Display every title candidate per chapter."""
    table = Table(
        title="📚 Title candidates", show_header=True, header_style="bold magenta"
    )
    table.add_column("#", style="dim", width=6)
    table.add_column("Section", style="yellow")
    table.add_column("TOC", style="cyan")
    table.add_column("Title Tag")
    table.add_column("Section Tag")
    table.add_column("Resolved", style="green")

    for chapter in chapters:
        table.add_row(
            str(chapter.ordinal),
            chapter.id,
            chapter.toc_title,
            chapter.title_tag_title,
            chapter.section_title,
            chapter.display_title,
        )

    console.print(table)
    if candidates.title_tags_uniform:
        console.print("[dim]Title tags are all the same or all empty.[/dim]")
    if candidates.section_tags_uniform:
        console.print("[dim]Section tags are all the same or all empty.[/dim]")


def _load_custom_rules(rules: Path, no_rules: bool):
    if no_rules:
        return None
    custom_rules = load_rules(rules)
    if custom_rules is None:
        console.print(f"[dim]No custom replacements ({rules} not found)[/dim]")
    else:
        console.print(f"Loaded {len(custom_rules)} custom replacement(s) from {rules}")
    return custom_rules


@click.group()
@click.version_option(version=__version__, prog_name="epub2audiobook")
@click.option("--verbose", "-v", is_flag=True, help="Log progress details")
def cli(verbose: bool):
    """
    epub2audiobook - Split an EPUB into per-chapter text for speech synthesis.
    """
    setup_logging(verbose)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--rules",
    "-r",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_RULES_FILE,
    show_default=True,
    help="Custom replacement file (PATTERN==REPLACEMENT per line)",
)
@click.option("--no-rules", is_flag=True, help="Ignore the custom replacement file")
@click.option(
    "--toc-match",
    type=click.Choice(TOC_MATCH_STRATEGIES),
    default="last",
    show_default=True,
    help="Which TOC entry wins when several point at the same document",
)
@click.option("--no-currency", is_flag=True, help="Don't expand dollar amounts")
@click.option("--no-speed", is_flag=True, help="Don't expand kph/mph")
def convert(
    filepath: Path,
    output_dir: Path,
    rules: Path,
    no_rules: bool,
    toc_match: str,
    no_currency: bool,
    no_speed: bool,
):
    """Convert an EPUB into per-chapter text files in OUTPUT_DIR."""
    try:
        custom_rules = _load_custom_rules(rules, no_rules)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task(f"Loading {filepath.name}...", total=None)
            parser = EPUBParser(str(filepath))
            metadata = parser.get_metadata()
            progress.stop()

        console.print(f"[bold]Title:[/bold] {metadata.title}")
        console.print(f"[bold]Author:[/bold] {metadata.author}")

        converter = BookConverter(
            output_dir,
            cleaner=TextCleaner(
                expand_currency=not no_currency, expand_speed=not no_speed
            ),
            custom_rules=custom_rules,
            toc_match=toc_match,
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Converting chapters...", total=None)
            chapters = converter.convert(parser)
            progress.stop()

        if not chapters:
            console.print("[yellow]No chapters found in EPUB file.[/yellow]")
            return

        display_chapters_table(chapters)
        console.print(
            f"\n[green]✓[/green] Wrote {len(chapters)} chapter(s) to {output_dir}"
        )

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--toc-match",
    type=click.Choice(TOC_MATCH_STRATEGIES),
    default="last",
    show_default=True,
    help="Which TOC entry wins when several point at the same document",
)
def titles(filepath: Path, toc_match: str):
    """Show the title candidates of every chapter without writing files."""
    try:
        parser = EPUBParser(str(filepath))
        chapters = parser.get_chapter_records()
        if not chapters:
            console.print("[yellow]No chapters found in EPUB file.[/yellow]")
            return

        resolver = TitleResolver(parser.get_toc(), toc_match=toc_match)
        candidates = resolver.resolve(chapters)
        display_candidates_table(chapters, candidates)

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--rules",
    "-r",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_RULES_FILE,
    show_default=True,
    help="Custom replacement file (PATTERN==REPLACEMENT per line)",
)
@click.option("--no-rules", is_flag=True, help="Ignore the custom replacement file")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file path (default: stdout)",
)
def normalize(filepath: Path, rules: Path, no_rules: bool, output: Optional[Path]):
    """Normalize a plain-text file the way chapter text is normalized."""
    try:
        custom_rules = None if no_rules else load_rules(rules)
        text = normalize_text(filepath.read_text(encoding="utf-8"), custom_rules)

        if output:
            output.write_text(text, encoding="utf-8")
            console.print(f"[green]✓[/green] Wrote {len(text):,} characters to {output}")
        else:
            # Write to stdout (bypass rich console)
            print(text, end="")

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
