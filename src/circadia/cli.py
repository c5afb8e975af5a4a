"""CLI for the circadia sleep analytics engine."""

import logging

import click

from circadia.errors import SleepError


@click.group()
@click.option("--config", "-c", "config_path", default=None, type=click.Path(exists=True),
              help="JSON file of analysis config overrides.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """circadia: sleep staging and circadian rhythm analytics."""
    from circadia.config import DEFAULT_CONFIG, load_config

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path) if config_path else DEFAULT_CONFIG
    except SleepError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--epoch", "-e", default=None, type=float, help="Epoch length in seconds.")
@click.option("--output", "-o", default=None, help="Write the analysis JSON to this file.")
@click.pass_context
def analyze(ctx: click.Context, file: str, epoch: float | None, output: str | None) -> None:
    """Stage a recorded night (JSONL samples) and print its summary."""
    from dataclasses import replace

    from circadia.analytics.pipeline import analyze_session
    from circadia.loader import load_samples

    config = ctx.obj["config"]
    if epoch is not None:
        if epoch <= 0:
            raise click.BadParameter("must be positive", param_hint="--epoch")
        config = replace(config, epoch_sec=epoch)

    try:
        samples = load_samples(file)
    except SleepError as e:
        raise click.ClickException(str(e)) from e

    analysis = analyze_session(samples, config)
    click.echo(f"{len(samples)} samples, {len(analysis.stages)} epochs")
    click.echo(repr(analysis))
    for insight in analysis.insights:
        click.echo(f"  - {insight.message}")

    if output:
        with open(output, "w") as f:
            f.write(analysis.to_json())
        click.echo(f"Analysis written to {output}")


@main.command()
@click.argument("history", type=click.Path(exists=True))
@click.option("--samples", "-s", "samples_path", default=None, type=click.Path(exists=True),
              help="JSONL live-context samples (temperature / heart rate).")
@click.option("--morning-light", default=0.5, type=click.FloatRange(0.0, 1.0),
              help="Morning light exposure, 0-1.")
@click.option("--late-light", default=0.0, type=click.FloatRange(0.0, 1.0),
              help="Late-night light exposure, 0-1.")
@click.option("--blue-light", default=0.0, type=click.FloatRange(0.0, 1.0),
              help="Evening blue light exposure, 0-1.")
@click.option("--total-light", default=0.5, type=click.FloatRange(0.0, 1.0),
              help="Total daily light exposure, 0-1.")
@click.pass_context
def circadian(
    ctx: click.Context,
    history: str,
    samples_path: str | None,
    morning_light: float,
    late_light: float,
    blue_light: float,
    total_light: float,
) -> None:
    """Print the circadian report for a session history (JSON list)."""
    from circadia.analytics.pipeline import analyze_circadian_rhythm
    from circadia.loader import load_samples, load_sessions
    from circadia.models import LightExposureProfile
    from circadia.sources import StaticLightExposure

    try:
        sessions = load_sessions(history)
        live = load_samples(samples_path) if samples_path else []
    except SleepError as e:
        raise click.ClickException(str(e)) from e

    light = StaticLightExposure(LightExposureProfile(
        morning_light_exposure=morning_light,
        late_night_exposure=late_light,
        blue_light_exposure=blue_light,
        total_daily_exposure=total_light,
    ))
    report = analyze_circadian_rhythm(sessions, live, light_source=light, config=ctx.obj["config"])
    click.echo(report.to_json())


if __name__ == "__main__":
    main()
