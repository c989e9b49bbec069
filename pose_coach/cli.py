from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import typer
from rich.progress import Progress

from pose_coach.processing.comparison.scoring import compare_frame, compare_to_reference, load_reference_pose
from pose_coach.processing.config import (
    PoseConfig,
    config_as_dict,
    get_config,
    load_config_from_file,
    load_mapping_file,
)
from pose_coach.processing.export import batch_export_pose_data, frames_to_dataframe, summarize_session
from pose_coach.processing.models import JointAngles, LandmarkValidationError, PoseFrame, ReferencePose
from pose_coach.processing.pipeline import FramePipeline

app = typer.Typer(help="Turn pose landmarks into joint angles, quality verdicts and posture feedback.")


def _fail(message: str, *, code: int = 1) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


def _resolve_config(config_path: Optional[Path]) -> PoseConfig:
    if config_path is None:
        return get_config()
    try:
        return load_config_from_file(config_path)
    except (FileNotFoundError, ValueError, ImportError) as exc:
        _fail(f"Could not load config: {exc}")
        raise  # pragma: no cover - _fail always exits


def _load_frames(path: Path) -> List[Dict[str, Any]]:
    """Read frames from JSON.

    Accepted shapes: `[{"landmarks": [...], "timestamp": ..}, ...]`, a list of
    bare landmark lists, or `{"frames": [...]}`.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, Mapping):
        payload = payload.get("frames")
    if not isinstance(payload, list):
        raise ValueError("Expected a list of frames (or an object with a 'frames' list).")

    frames: List[Dict[str, Any]] = []
    for idx, entry in enumerate(payload):
        if isinstance(entry, Mapping):
            landmarks = entry.get("landmarks")
            if not isinstance(landmarks, list):
                raise ValueError(f"Frame {idx} has no 'landmarks' list.")
            frames.append(
                {
                    "landmarks": landmarks,
                    "timestamp": entry.get("timestamp", entry.get("timestamp_ms")),
                    "frame_number": entry.get("frame_number", entry.get("frameNumber")),
                }
            )
        elif isinstance(entry, list):
            frames.append({"landmarks": entry, "timestamp": None, "frame_number": None})
        else:
            raise ValueError(f"Frame {idx} must be an object or a list of landmarks.")
    return frames


def _load_reference(path: Path) -> ReferencePose:
    try:
        return load_reference_pose(path)
    except (FileNotFoundError, ValueError, ImportError) as exc:
        _fail(f"Could not load reference pose: {exc}")
        raise  # pragma: no cover - _fail always exits


def render_angle_table(rows: Sequence[Mapping[str, Any]], headers: Sequence[str]) -> str:
    """Render a fixed-width table for CLI output."""
    cells = [{key: "n/a" if row.get(key) is None else str(row.get(key)) for key in headers} for row in rows]
    widths = {key: len(key) for key in headers}
    for row in cells:
        for key in headers:
            widths[key] = max(widths[key], len(row[key]))

    def _format_line(values: Mapping[str, str]) -> str:
        return "  ".join(values[key].rjust(widths[key]) for key in headers)

    lines = [_format_line({key: key for key in headers})]
    lines.extend(_format_line(row) for row in cells)
    return "\n".join(lines)


@app.command()
def process(
    source: Path = typer.Argument(..., help="JSON file with landmark frames."),
    out: Path = typer.Option(
        Path("pose_export.json"),
        "--out",
        "-o",
        help="Where to write the exported frame records (JSON).",
    ),
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Optionally write one row per frame (angles as columns) to CSV.",
    ),
    reference: Optional[Path] = typer.Option(
        None,
        "--reference",
        "-r",
        help="Reference pose (JSON/TOML) to score every frame against.",
    ),
    tolerance: Optional[float] = typer.Option(
        None,
        "--tolerance",
        "-t",
        help="Per-joint tolerance in degrees (defaults to config).",
    ),
    smoothing: Optional[bool] = typer.Option(
        None,
        "--smoothing/--no-smoothing",
        help="Enable or disable EMA smoothing (defaults to config).",
    ),
    smoothing_factor: Optional[float] = typer.Option(
        None,
        "--smoothing-factor",
        help="Raw-frame weight of the EMA in [0,1] (defaults to config).",
    ),
    session_id: Optional[str] = typer.Option(
        None,
        "--session-id",
        help="Session identifier stored with each exported record.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML/JSON config file (env vars still take precedence).",
    ),
) -> None:
    """
    Run the frame pipeline over a recorded landmark sequence.
    """
    config = _resolve_config(config_path).with_overrides(
        enable_smoothing=smoothing,
        smoothing_factor=smoothing_factor,
        tolerance_degrees=tolerance,
    )
    try:
        frames_in = _load_frames(source)
    except FileNotFoundError:
        _fail(f"Input not found: {source}")
    except (json.JSONDecodeError, ValueError) as exc:
        _fail(f"Could not read frames from {source}: {exc}")

    target = _load_reference(reference) if reference else None
    pipeline = FramePipeline(config, session_id=session_id)

    frames: List[PoseFrame] = []
    scores: List[Optional[int]] = []
    try:
        with Progress(transient=True) as progress:
            task = progress.add_task(f"Processing {source.name}", total=len(frames_in))
            for entry in frames_in:
                frame = pipeline.process_frame(
                    entry["landmarks"],
                    timestamp_ms=entry["timestamp"],
                    frame_number=entry["frame_number"],
                )
                frames.append(frame)
                if target is not None:
                    scores.append(compare_frame(frame, target, config.tolerance_degrees).score)
                progress.advance(task)
    except (LandmarkValidationError, ValueError) as exc:
        _fail(f"Invalid frame data: {exc}")

    records = batch_export_pose_data(frames)
    if target is not None:
        for record, score in zip(records, scores):
            record["score"] = score

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(records, indent=2), encoding="utf-8")
    if csv_path is not None:
        table = frames_to_dataframe(frames)
        if target is not None:
            table["score"] = scores
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(csv_path, index=False)

    stats = summarize_session(frames)
    typer.echo(
        f"Session {pipeline.session_id}: {stats.total_frames} frames, "
        f"{stats.frames_with_person} with person in frame, "
        f"avg confidence {stats.avg_confidence:.2f}, {stats.avg_fps:.1f} fps."
    )
    if stats.avg_angles:
        rows = [{"joint": name, "avg_degrees": f"{value:.1f}"} for name, value in stats.avg_angles.items()]
        typer.echo(render_angle_table(rows, ("joint", "avg_degrees")))
    if target is not None and scores:
        typer.echo(f"Average score vs '{target.name}': {sum(scores) / len(scores):.1f}")
    typer.echo(f"Wrote {len(records)} records to {out}")


@app.command()
def compare(
    angles_path: Path = typer.Option(..., "--angles", "-a", help="JSON/TOML file of detected joint angles."),
    reference: Path = typer.Option(..., "--reference", "-r", help="Reference pose (JSON/TOML)."),
    tolerance: Optional[float] = typer.Option(
        None,
        "--tolerance",
        "-t",
        help="Per-joint tolerance in degrees (defaults to config).",
    ),
    rank: bool = typer.Option(False, "--rank", help="Order feedback by the size of the deviation."),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    """
    Score one set of joint angles against a reference pose.
    """
    try:
        payload = load_mapping_file(angles_path)
        detected = JointAngles(payload.get("angles", payload))
    except (FileNotFoundError, ValueError, ImportError) as exc:
        _fail(f"Could not load angles: {exc}")
    target = _load_reference(reference)
    tol = tolerance if tolerance is not None else get_config().tolerance_degrees
    try:
        result = compare_to_reference(detected, target, tol, rank_by_severity=rank)
    except ValueError as exc:
        _fail(str(exc))

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    typer.echo(f"Score vs '{target.name}': {result.score}/100 ({result.cue})")
    typer.echo(render_angle_table(result.joints, ("joint", "detected", "reference", "status")))
    for line in result.feedback:
        typer.echo(f"- {line}")


@app.command("config")
def config_show(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML/JSON config file to inspect instead of the default lookup.",
    ),
) -> None:
    """
    Show the effective pipeline configuration.
    """
    config = _resolve_config(config_path)
    payload = config_as_dict(config, source=config_path)
    typer.echo(f"Config source: {payload.pop('source')}")
    for key, value in payload.items():
        typer.echo(f"{key}: {value}")


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
