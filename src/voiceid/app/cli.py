"""CLI application entry point."""

from functools import wraps
from pathlib import Path
from typing import Optional

import click

from voiceid import __version__
from voiceid.errors import BiometricsError
from voiceid.utils import Settings, apply_settings, load_config, setup_logging
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)


def _report_errors(func):
    """Turn engine errors into a clean CLI error and exit code 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BiometricsError as e:
            raise click.ClickException(str(e)) from e
    return wrapper


def _engine(ctx: click.Context):
    from voiceid.speaker.manager import VoiceBiometrics

    if "engine" not in ctx.obj:
        engine = VoiceBiometrics.from_config(ctx.obj["config"])
        ctx.obj["engine"] = engine
        ctx.call_on_close(engine.close)
    return ctx.obj["engine"]


def _load(path: str, sample_rate: int):
    from voiceid.audio.io import load_audio

    try:
        return load_audio(path, target_rate=sample_rate)
    except RuntimeError as e:
        # soundfile raises LibsndfileError (a RuntimeError) for unreadable files
        raise click.ClickException(f"Cannot read audio file {path}: {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Path to YAML config file")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="Profile database path (overrides config)")
@click.option("--extractor", type=click.Choice(["speechbrain", "simulated"]), help="Embedding extractor to use")
@click.option("--quiet", is_flag=True, help="Reduce log output (only warnings and errors)")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], db_path: Optional[str], extractor: Optional[str], quiet: bool):
    """Speaker enrollment and identification."""
    settings = Settings()
    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        quiet=quiet,
    )

    config = apply_settings(load_config(config_path or settings.config_path), settings)
    if db_path:
        config.storage.db_path = Path(db_path)
    if extractor:
        config.speaker.extractor = extractor

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("name")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@_report_errors
def enroll(ctx: click.Context, name: str, files: tuple):
    """Enroll NAME from three or more voice recordings."""
    engine = _engine(ctx)
    samples = [_load(path, engine.config.audio.sample_rate) for path in files]

    click.echo(f"Enrolling '{name}' from {len(samples)} samples...")
    profile_id = engine.enroll(name, samples)
    click.echo(f"✓ Enrolled '{name}' (id={profile_id})")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Show the similarity to every enrolled user")
@click.pass_context
@_report_errors
def identify(ctx: click.Context, file: str, verbose: bool):
    """Identify the speaker in FILE."""
    engine = _engine(ctx)
    audio = _load(file, engine.config.audio.sample_rate)

    profile, scored = engine.identification.identify_ranked(audio)
    if verbose:
        for candidate, score in scored:
            click.echo(f"  {candidate.id:>4}  {candidate.name:<30} {score:.3f}")

    if profile is None:
        click.echo("No matching speaker")
        return
    click.echo(f"✓ {profile.name} (id={profile.id}, recognized {profile.recognition_count} times)")


@cli.command(name="list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deactivated profiles")
@click.pass_context
@_report_errors
def list_profiles(ctx: click.Context, include_inactive: bool):
    """List enrolled users."""
    profiles = _engine(ctx).list_profiles(include_inactive=include_inactive)
    if not profiles:
        click.echo("No enrolled users")
        return

    for profile in profiles:
        last = profile.last_recognized.strftime("%Y-%m-%d %H:%M") if profile.last_recognized else "never"
        status = "" if profile.is_active else "  (inactive)"
        click.echo(
            f"{profile.id:>4}  {profile.name:<30} enrolled {profile.enrollment_date:%Y-%m-%d}  "
            f"recognized {profile.recognition_count}x, last {last}{status}"
        )


@cli.command()
@click.argument("profile_id", type=int)
@click.pass_context
@_report_errors
def deactivate(ctx: click.Context, profile_id: int):
    """Exclude a profile from identification, keeping its record."""
    _engine(ctx).deactivate(profile_id)
    click.echo(f"✓ Profile {profile_id} deactivated")


@cli.command()
@click.argument("profile_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
@_report_errors
def delete(ctx: click.Context, profile_id: int, yes: bool):
    """Permanently delete a profile."""
    engine = _engine(ctx)
    profile = engine.get_profile(profile_id)
    if not yes:
        click.confirm(f"Delete profile '{profile.name}' (id={profile_id})?", abort=True)
    engine.delete(profile_id)
    click.echo(f"✓ Profile {profile_id} deleted")


@cli.command()
@click.pass_context
@_report_errors
def status(ctx: click.Context):
    """Show model and database status."""
    engine = _engine(ctx)
    config = engine.config
    click.echo(f"Extractor:  {config.speaker.extractor} ({type(engine.extractor).__name__})")
    click.echo(f"Model ready: {'yes' if engine.is_model_ready() else 'no'}")
    click.echo(f"Database:   {config.storage.db_path}")
    click.echo(f"Profiles:   {engine.store.count_active()} active")
    click.echo(f"Threshold:  {config.identification.recognition_threshold:.2f}")


if __name__ == "__main__":
    cli()
