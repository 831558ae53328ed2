"""Click CLI for specifier-sync."""

import click


def _configure_logging(verbose: bool) -> None:
    import logging

    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


def _parse_pairs(pairs: tuple[str, ...], option: str) -> dict[str, str]:
    """Turn ("a=b", ...) into {"a": "b"}."""
    table: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key or not value:
            raise click.UsageError(f"{option} expects KEY=VALUE, got {pair!r}")
        table[key] = value
    return table


@click.group()
def cli():
    """specifier-sync: rewrite module specifiers and extensions in bundle output."""


@cli.command()
@click.argument("project_path", default=".", type=click.Path(exists=True, file_okay=False))
def init(project_path):
    """Create a specifier.toml with commented defaults."""
    from pathlib import Path

    from specifier_sync.config import create_default_config

    config_path = create_default_config(Path(project_path).resolve())
    click.echo(f"Created {config_path}")


@cli.command()
@click.argument("project_path", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--out-dir", default=None, help="Bundle output directory (default: [specifier] out_dir or dist).")
@click.option("--manifest", "manifest", multiple=True, help="Emitted filename relative to the output directory. Repeatable.")
@click.option("--ext-map", "ext_pairs", multiple=True, help="Extension mapping such as .js=.mjs or .d.ts=dual. Repeatable.")
@click.option("--map", "map_pairs", multiple=True, help="Exact specifier substitution such as ./a.js=./b.mjs. Repeatable.")
@click.option("--write/--no-write", default=None, help="Persist handler rewrites in place.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def rewrite(project_path, out_dir, manifest, ext_pairs, map_pairs, write, verbose):
    """Rewrite specifiers across an existing bundle output directory."""
    from pathlib import Path

    from specifier_sync.config import ConfigurationError, load_config, options_from_config
    from specifier_sync.plugin import SpecifierOptions, SpecifierPlugin
    from specifier_sync.scanner import scan_scripts

    _configure_logging(verbose)

    project = Path(project_path).resolve()
    try:
        options = options_from_config(load_config(project))
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    # CLI flags override the config file
    if out_dir is not None:
        options["out_dir"] = out_dir
    if ext_pairs:
        options["ext_map"] = _parse_pairs(ext_pairs, "--ext-map")
    if map_pairs:
        options["map"] = _parse_pairs(map_pairs, "--map")
    if write is not None:
        options["writer"] = write
    # The CLI always runs the post-write pass
    options["hook"] = "writeBundle"

    try:
        plugin = SpecifierPlugin(SpecifierOptions(**options), cwd=project)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    target = plugin.resolved.out_dir
    if not target.is_dir():
        raise click.UsageError(f"Output directory not found: {target}")

    if manifest:
        names = list(manifest)
    else:
        names = [p.relative_to(target).as_posix() for p in scan_scripts(target)]

    report = plugin.write_bundle(target, names)

    click.echo(f"Rewrote {target}")
    click.echo(f"  Files processed: {report.files_processed}")
    click.echo(f"  Rewritten:       {report.files_rewritten}")
    click.echo(f"  Renamed:         {report.files_renamed}")
    click.echo(f"  Rewrite errors:  {report.rewrite_errors}")
    click.echo(f"  Write failures:  {len(report.write_failures)}")
    click.echo(f"  Duration:        {report.duration_ms}ms")

    if not report.ok:
        for line in report.failed_files():
            click.echo(f"    {line}", err=True)
        raise click.ClickException(
            f"{report.rewrite_errors + len(report.write_failures)} file(s) failed"
        )


@cli.command("list")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def list_specifiers(file_path, verbose):
    """Print every import/export specifier found in a file."""
    from pathlib import Path

    from specifier_sync.classifier import classify
    from specifier_sync.parsers.specifier_parser import get_parser

    _configure_logging(verbose)

    path = Path(file_path)
    file_class = classify(path.name)
    dialect = "typescript" if file_class.is_declaration else file_class.dialect
    try:
        specs = get_parser(dialect).find_specifiers(path.read_bytes())
    except SyntaxError as e:
        raise click.ClickException(f"{path}: {e}") from e

    for spec in specs:
        click.echo(f"{spec.line}:{spec.column} {spec.kind} {spec.value}")
