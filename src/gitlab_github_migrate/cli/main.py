"""Main CLI entry point for the GitLab to GitHub migration tool."""

import sys
from typing import Optional
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..api.exceptions import ConfigurationError
from ..config.config import Config
from ..migration.engine import MigrationEngine
from ..migration.orchestrator import MigrationSummary
from ..utils.logging import setup_logging
from ..utils.progress import ProgressReporter

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL_FAILURE = 2

DEFAULT_CONFIG_PATHS = ['config.yaml', 'config.yml', '.gitlab-github-migrate.yaml']

console = Console()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name='gitlab-github-migrate')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """GitLab to GitHub Migration Tool - Copy labels, milestones and issues from a GitLab project to a GitHub repository."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Basic logging until the configuration is loaded
    setup_logging('DEBUG' if verbose else 'INFO', verbose=verbose)

    if ctx.invoked_subcommand is None:
        ctx.invoke(migrate)


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]GitLab to GitHub Migration Tool[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            f'[yellow]Please edit {output} with your GitLab and GitHub details[/yellow]'
        )

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(EXIT_ERROR)


@cli.command()
@click.option(
    '--dry-run',
    is_flag=True,
    help='Read the source and list items without writing to GitHub',
)
@click.pass_context
def migrate(ctx: click.Context, dry_run: bool = False) -> None:
    """Migrate labels, milestones and issues."""
    console.print(
        Panel.fit(
            '[bold blue]GitLab to GitHub Migration Tool[/bold blue]\n'
            'Starting migration process...',
            border_style='blue',
        )
    )

    if dry_run:
        console.print(
            '[yellow]Running in dry-run mode - no changes will be made[/yellow]'
        )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        if dry_run:
            config.migration.dry_run = True

        summary = _run_migration(config)

    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(EXIT_ERROR)

    _display_migration_summary(summary)

    if summary.failed:
        console.print(
            f'[red]✗[/red] Migration finished with '
            f'{summary.failed_migrations} failed item(s)'
        )
        sys.exit(EXIT_PARTIAL_FAILURE)

    console.print('[green]✓[/green] Migration completed successfully')


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate configuration and connectivity."""
    console.print(
        Panel.fit(
            '[bold cyan]GitLab to GitHub Migration Tool[/bold cyan]\n'
            'Validating configuration...',
            border_style='cyan',
        )
    )

    try:
        config = _load_config(ctx)

        engine = MigrationEngine(config)
        try:
            engine.test_connectivity()
        finally:
            engine.close()

        console.print('[green]✓[/green] Connectivity validation passed')
        console.print('[green]✓[/green] Configuration validation completed')

    except Exception as e:
        console.print(f'[red]✗[/red] Validation failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(EXIT_ERROR)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    console.print(
        Panel.fit(
            '[bold magenta]GitLab to GitHub Migration Tool[/bold magenta]\n'
            'Migration Configuration',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)

        table = Table(title='Migration Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        table.add_row('GitLab URL', config.source.url)
        table.add_row('GitLab Project', str(config.source.project_id))
        table.add_row('GitLab Token', _mask(config.source.token))
        table.add_row(
            'GitHub Repository',
            f'{config.destination.owner}/{config.destination.repo}',
        )
        table.add_row('GitHub API', config.destination.api_url)
        table.add_row('GitHub Token', _mask(config.destination.token))
        table.add_row('Migrate Labels', '✓' if config.migration.labels else '✗')
        table.add_row('Migrate Milestones', '✓' if config.migration.milestones else '✗')
        table.add_row('Migrate Issues', '✓' if config.migration.issues else '✗')
        table.add_row('Max Retry Attempts', str(config.migration.max_retry_attempts))
        table.add_row('Secondary Pause (ms)', str(config.migration.secondary_pause_ms))

        console.print(table)

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(EXIT_ERROR)


def _mask(token: str) -> str:
    """Show only the last four characters of a secret."""
    if len(token) <= 4:
        return '****'
    return '*' * 8 + token[-4:]


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    try:
        if config_path:
            if not Path(config_path).exists():
                raise FileNotFoundError(f'Configuration file not found: {config_path}')
            return Config.from_file(config_path)

        for path in DEFAULT_CONFIG_PATHS:
            if Path(path).exists():
                return Config.from_file(path)

        return Config.from_env()

    except ValidationError as e:
        problems = '; '.join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f'Invalid configuration ({problems}). Use --config to specify a file '
            f'or run "gitlab-github-migrate init" to create one.'
        ) from e


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    # Verbose flag overrides the configured level
    log_level = 'DEBUG' if verbose else config.logging.level
    setup_logging(
        level=log_level,
        log_file=config.logging.file,
        log_format=config.logging.format,
        verbose=verbose,
    )


def _run_migration(config: Config) -> MigrationSummary:
    """Run the migration, printing progress to the console."""
    engine = MigrationEngine(config, progress=ProgressReporter(console))
    return engine.migrate()


def _display_migration_summary(summary: MigrationSummary) -> None:
    """Display migration summary results."""
    table = Table(title='Migration Summary')
    table.add_column('Entity Type', style='cyan')
    table.add_column('Total', style='blue')
    table.add_column('Successful', style='green')
    table.add_column('Failed', style='red')

    for batch in summary.batches:
        table.add_row(
            batch.entity_kind,
            str(batch.total) if batch.fetch_error is None else 'fetch failed',
            str(batch.successful),
            str(batch.failed),
        )

    console.print()
    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Migration Duration:[/blue] {duration}')

    failures = [
        f'{batch.entity_kind[:-1]}: {key}'
        for batch in summary.batches
        for key in batch.failed_items
    ]
    if failures:
        console.print(f'\n[red]Failed items ({len(failures)}):[/red]')
        for failure in failures[:10]:
            console.print(f'  • {failure}', markup=False)
        if len(failures) > 10:
            console.print(f'  ... and {len(failures) - 10} more')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Migration interrupted by user[/red]')
        sys.exit(EXIT_ERROR)
    except Exception as e:
        console.print(f'[red]Error: {e}[/red]')
        sys.exit(EXIT_ERROR)


if __name__ == '__main__':
    main()
