import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import typer

from arearisk.config import DEFAULT_SCALE_FACTOR, ReferenceConfig, load_reference_config
from arearisk.errors import ConfigError, DataError
from arearisk.estimation import DEFAULT_TAILS, derive_prior, prior_from_moments
from arearisk.pipelines import run_estimation
from arearisk.reporting import RankingReporter
from arearisk.tables import (
    estimates_to_frame,
    manifest_to_frame,
    observations_from_frame,
    read_observations_csv,
    write_table_csv,
)
from experiments.worked_examples import SCENARIOS, run_worked_examples

app = typer.Typer()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log per-area warnings and run summaries.")):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def estimate(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV with areaId, eventCount, exposureCount."),
    output_path: Path = typer.Argument(..., dir_okay=False, help="Where to write the estimate table."),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        help="JSON file with globalIncidenceRate, globalExposureTotal and optional extras (omit the rate with --fit-prior).",
    ),
    incidence_rate: Optional[float] = typer.Option(None, "--incidence-rate", help="Global events per unit exposure."),
    exposure_total: Optional[float] = typer.Option(None, "--exposure-total", help="Exposure behind the global rate."),
    reference_scale: Optional[float] = typer.Option(
        None,
        "--reference-scale",
        help="Prior equivalent sample size (defaults to the median area exposure).",
    ),
    scale_factor: Optional[float] = typer.Option(None, "--scale-factor", help="Report rates per this many units."),
    lower_tail: Optional[float] = typer.Option(None, "--lower-tail", help="Lower credible tail probability."),
    upper_tail: Optional[float] = typer.Option(None, "--upper-tail", help="Upper credible tail probability."),
    manifest_path: Optional[Path] = typer.Option(
        None,
        "--manifest",
        dir_okay=False,
        help="Where to write rejected/degraded areas (defaults next to the output).",
    ),
    fit_prior: bool = typer.Option(
        False,
        "--fit-prior",
        help="Fit the prior to the area rates by method of moments instead of using a global rate.",
    ),
    workers: int = typer.Option(1, "--workers", min=1, help="Processes used for the per-area estimates."),
    top: int = typer.Option(5, "--top", min=0, help="Print the highest and lowest N areas."),
) -> None:
    """
    Shrink every area's observed rate toward the global rate and write posterior means with credible intervals.
    """
    try:
        config = _resolve_config(
            config_path,
            incidence_rate,
            exposure_total,
            reference_scale,
            scale_factor,
            lower_tail,
            upper_tail,
            fit_prior,
        )
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    frame = read_observations_csv(input_path)
    try:
        run = run_estimation(observations_from_frame(frame), config, max_workers=workers)
    except (ConfigError, DataError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"[prior] alpha0={run.prior.alpha0:.6g} beta0={run.prior.beta0:.6g} "
        f"mean={run.prior.mean * config.scale_factor:.4g} per {config.scale_factor:,.0f}"
    )

    write_table_csv(estimates_to_frame(run, config.scale_factor), output_path)
    typer.echo(f"[estimate] Wrote {len(run.estimates)} areas to {output_path}")

    manifest_target = manifest_path or output_path.with_name(f"{output_path.stem}_manifest.csv")
    write_table_csv(manifest_to_frame(run), manifest_target)
    typer.echo(
        f"[manifest] {len(run.rejected)} rejected, {len(run.degraded)} without interval -> {manifest_target}"
    )

    if top:
        reporter = RankingReporter(run.estimates)
        for label, selected in (("highest", reporter.top_n(top)), ("lowest", reporter.bottom_n(top))):
            typer.echo(f"[ranking] {label} {len(selected)}:")
            for est in selected:
                typer.echo(f"  {est.area_id}: {est.mean * config.scale_factor:.2f} ({est.event_count}/{est.exposure_count})")


@app.command()
def prior(
    incidence_rate: float = typer.Option(..., "--incidence-rate", help="Global events per unit exposure."),
    exposure_total: Optional[float] = typer.Option(None, "--exposure-total", help="Exposure behind the global rate."),
    reference_scale: Optional[float] = typer.Option(None, "--reference-scale", help="Prior equivalent sample size."),
    stddev: Optional[float] = typer.Option(
        None,
        "--stddev",
        help="Use the literal mean/stddev variant instead (alpha0 = mean/stddev).",
    ),
) -> None:
    """
    Print the Beta prior hyperparameters implied by aggregate values.
    """
    try:
        if stddev is not None:
            hyper = prior_from_moments(incidence_rate, stddev)
        else:
            if exposure_total is None or reference_scale is None:
                raise typer.BadParameter("--exposure-total and --reference-scale are required without --stddev.")
            hyper = derive_prior(incidence_rate, exposure_total, reference_scale)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(f"alpha0={hyper.alpha0:.6g}")
    typer.echo(f"beta0={hyper.beta0:.6g}")
    typer.echo(f"mean={hyper.mean:.6g}")
    typer.echo(f"equivalent_sample_size={hyper.effective_sample_size:.6g}")


@app.command()
def examples(
    scale_factor: float = typer.Option(DEFAULT_SCALE_FACTOR, "--scale-factor", help="Report rates per this many units."),
) -> None:
    """
    Run the worked scenarios and print their estimates.
    """
    for scenario in SCENARIOS:
        typer.echo(f"[{scenario.name}] {scenario.note}")
    estimates, manifest = run_worked_examples(scale_factor)
    with pd.option_context("display.max_columns", None, "display.width", 160):
        typer.echo(estimates.to_string(index=False))
        if not manifest.empty:
            typer.echo("")
            typer.echo(manifest.to_string(index=False))


def _resolve_config(
    config_path: Optional[Path],
    incidence_rate: Optional[float],
    exposure_total: Optional[float],
    reference_scale: Optional[float],
    scale_factor: Optional[float],
    lower_tail: Optional[float],
    upper_tail: Optional[float],
    fit_prior: bool = False,
) -> ReferenceConfig:
    """Merge the optional JSON config with CLI overrides."""
    fields: Dict[str, Any] = asdict(load_reference_config(config_path)) if config_path else {}
    overrides = {
        "global_incidence_rate": incidence_rate,
        "global_exposure_total": exposure_total,
        "reference_exposure_scale": reference_scale,
        "scale_factor": scale_factor,
    }
    fields.update({key: value for key, value in overrides.items() if value is not None})

    if fit_prior:
        fields["global_incidence_rate"] = None
        fields["global_exposure_total"] = None
    elif fields.get("global_incidence_rate") is None or fields.get("global_exposure_total") is None:
        raise ConfigError(
            "Provide --incidence-rate and --exposure-total, a --config file containing them, or --fit-prior."
        )

    low, high = fields.get("tails", DEFAULT_TAILS)
    fields["tails"] = (
        lower_tail if lower_tail is not None else low,
        upper_tail if upper_tail is not None else high,
    )

    config = ReferenceConfig(**fields)
    config.validate()
    return config


if __name__ == "__main__":
    app()
