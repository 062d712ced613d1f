from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd

from arearisk.config import DEFAULT_SCALE_FACTOR
from arearisk.estimation import AreaObservation, PriorHyperparameters
from arearisk.pipelines import EstimationRun, estimate_areas, sanitize_batch
from arearisk.tables import estimates_to_frame, manifest_to_frame
from arearisk.tables.frames import MANIFEST_COLUMNS


@dataclass(frozen=True)
class Scenario:
    name: str
    prior: PriorHyperparameters
    observations: Tuple[AreaObservation, ...]
    note: str


SCENARIOS: Tuple[Scenario, ...] = (
    Scenario(
        name="A",
        prior=PriorHyperparameters(alpha0=1.0, beta0=1132.0),
        observations=(AreaObservation("A-zero-events", 0, 1011),),
        note="No events in ~1k births still gets a non-zero risk near 1/2144.",
    ),
    Scenario(
        name="B",
        prior=PriorHyperparameters(alpha0=0.189, beta0=213.0),
        observations=(AreaObservation("B-five-events", 5, 1000),),
        note="Five events in 1000 is pulled only slightly toward the prior.",
    ),
    Scenario(
        name="C",
        prior=PriorHyperparameters(alpha0=0.189, beta0=213.0),
        observations=(AreaObservation("C-tiny-area", 0, 10),),
        note="Ten units of exposure barely move the prior.",
    ),
    Scenario(
        name="rejection",
        prior=PriorHyperparameters(alpha0=0.189, beta0=213.0),
        observations=(
            AreaObservation("bad-row", 5, 3),
            AreaObservation("good-row", 2, 400),
            AreaObservation("no-births", 0, 0),
        ),
        note="Invalid rows are listed in the manifest; valid rows still get estimates.",
    ),
)


def run_scenario(scenario: Scenario) -> EstimationRun:
    sanitized, rejected = sanitize_batch(scenario.observations)
    return estimate_areas(sanitized, scenario.prior, rejected=rejected)


def run_worked_examples(
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Run every scenario and stack the estimate and manifest tables."""
    estimate_frames: List[pd.DataFrame] = []
    manifest_frames: List[pd.DataFrame] = []
    for scenario in SCENARIOS:
        run = run_scenario(scenario)

        estimates = estimates_to_frame(run, scale_factor)
        estimates.insert(0, "scenario", scenario.name)
        estimates["priorMean"] = scenario.prior.mean * scale_factor
        estimate_frames.append(estimates)

        manifest = manifest_to_frame(run)
        manifest.insert(0, "scenario", scenario.name)
        manifest_frames.append(manifest)

    manifest_frames = [frame for frame in manifest_frames if not frame.empty]
    manifest = (
        pd.concat(manifest_frames, ignore_index=True)
        if manifest_frames
        else pd.DataFrame(columns=["scenario", *MANIFEST_COLUMNS])
    )
    return pd.concat(estimate_frames, ignore_index=True), manifest
