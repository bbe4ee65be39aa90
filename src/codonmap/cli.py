"""Command-line interface for codonmap.

Commands:
    locate: Locate codon coordinates for every transcript in an exon table

Example:
    $ codonmap --help
    $ codonmap locate --cds cds.tsv --genome genome.fa -o codons.tsv
    $ codonmap locate --cds cds.tsv --genome genome.fa -o codons.tsv \\
        --codon CAA:1:false --codon TGG:2:true -j 8
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from codonmap import __version__

# Initialize rich console for pretty output
console = Console()

_TRUE_WORDS = {"true", "t", "yes", "y", "1"}
_FALSE_WORDS = {"false", "f", "no", "n", "0"}


def _parse_codon_option(value: str) -> tuple[str, int, bool]:
    """Parse CODON[:OFFSET[:SWITCH]] into its three parts."""
    parts = value.split(":")
    if not 1 <= len(parts) <= 3:
        raise click.BadParameter(f"Expected CODON[:OFFSET[:SWITCH]], got {value!r}")

    codon = parts[0]
    try:
        offset = int(parts[1]) if len(parts) > 1 else 1
    except ValueError:
        raise click.BadParameter(f"Offset must be an integer in {value!r}") from None

    switch = False
    if len(parts) > 2:
        word = parts[2].lower()
        if word in _TRUE_WORDS:
            switch = True
        elif word not in _FALSE_WORDS:
            raise click.BadParameter(f"Strand switch must be true/false in {value!r}")

    return codon, offset, switch


@click.group()
@click.version_option(version=__version__, prog_name="codonmap")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """codonmap: locate targetable codons in transcript coding sequences."""
    from codonmap.utils.logging import setup_logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    setup_logging(verbosity=0 if quiet else (2 if verbose else 1))


# =============================================================================
# locate command
# =============================================================================


@main.command()
@click.option(
    "--cds",
    "cds_table",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Tab-separated CDS exon table (tx, gene, exon, chr, strand, start, end).",
)
@click.option(
    "--genome",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Reference genome FASTA file matching the exon coordinates.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output TSV of located codons.",
)
@click.option(
    "--codon",
    "codon_options",
    multiple=True,
    help="Codon to locate as CODON[:OFFSET[:SWITCH]], e.g. TGG:2:true. "
    "Repeat for several codons. Replaces the default set.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file with a [locate] table.",
)
@click.option(
    "-j",
    "--workers",
    type=int,
    default=None,
    help="Number of parallel workers, 0 for one per CPU.  [default: 1]",
)
@click.option(
    "--backend",
    type=click.Choice(["serial", "threads", "processes"]),
    default=None,
    help="Parallel backend.  [default: threads]",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a debug log to this file.",
)
@click.pass_context
def locate(
    ctx: click.Context,
    cds_table: Path,
    genome: Path,
    output: Path,
    codon_options: tuple[str, ...],
    config_path: Optional[Path],
    workers: Optional[int],
    backend: Optional[str],
    log_file: Optional[Path],
) -> None:
    """Locate codon coordinates in every transcript of a CDS exon table.

    Each transcript's CDS is assembled from its exons and must begin with
    ATG, end with a stop codon, have a length that is a multiple of 3 and
    contain no internal in-frame stop. Transcripts failing these checks
    are excluded. Valid transcripts without any matching codon are kept as
    a single row with empty coordinates.

    \b
    Default codons (codon:offset:switch):
        CAA:1:false CAG:1:false CGA:1:false TGG:2:true TGG:3:true

    \b
    Examples:
        $ codonmap locate --cds cds.tsv --genome hg38.fa -o codons.tsv -j 8
    """
    from codonmap.config import LocateConfig
    from codonmap.core.locate import locate_codons
    from codonmap.core.models import InputValidationError
    from codonmap.io.fasta import GenomeAccessor
    from codonmap.io.tables import read_exon_table, write_results
    from codonmap.parallel.executor import get_optimal_workers
    from codonmap.utils.logging import progress_bar, setup_logging

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    if log_file is not None:
        setup_logging(verbosity=0 if quiet else (2 if verbose else 1), log_file=log_file)

    try:
        config = LocateConfig.load(config_path)
        if codon_options:
            parsed = [_parse_codon_option(value) for value in codon_options]
            config.codons = [codon for codon, _, _ in parsed]
            config.positions = [offset for _, offset, _ in parsed]
            config.switch_strand = [switch for _, _, switch in parsed]
        if workers is not None:
            config.workers = workers if workers > 0 else get_optimal_workers()
        if backend is not None:
            config.backend = backend

        specs = config.codon_specs()
        exons = read_exon_table(cds_table)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not quiet:
        console.print(f"[blue]CDS table:[/blue] {cds_table} ({len(exons)} exons)")
        console.print(f"[blue]Genome:[/blue] {genome}")
        console.print(
            "[blue]Codons:[/blue] "
            + " ".join(f"{s.codon}:{s.offset}:{str(s.switch_strand).lower()}" for s in specs)
        )
        console.print(f"[blue]Workers:[/blue] {config.workers} ({config.backend})")

    n_transcripts = len({exon.transcript_id for exon in exons})

    with GenomeAccessor(genome) as genome_accessor:
        try:
            with progress_bar(total=n_transcripts, enabled=not quiet) as callback:
                result = locate_codons(
                    exons,
                    genome_accessor,
                    specs=specs,
                    n_workers=config.workers,
                    backend=config.backend,
                    progress_callback=callback,
                )
        except InputValidationError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)

    write_results(result.rows, output)

    if not quiet:
        summary = result.summary
        console.print("\n[bold]Summary:[/bold]")
        console.print(f"  Transcripts: {summary.n_transcripts}")
        console.print(f"  [green]Valid ORF:[/green] {summary.n_valid}")
        console.print(f"  [yellow]Excluded (invalid ORF):[/yellow] {summary.n_invalid_orf}")
        console.print(f"  [yellow]No matching codon:[/yellow] {summary.n_no_match}")
        console.print(f"  [red]Failed:[/red] {summary.n_failed}")
        console.print(f"  Rows written: {summary.n_rows}")
        console.print(f"[green]Wrote results to:[/green] {output}")
        if verbose:
            for transcript_id, error in summary.failed.items():
                console.print(f"  [red]{transcript_id}:[/red] {error}")


if __name__ == "__main__":
    main()
