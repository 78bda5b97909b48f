"""Iconwright - Source image to normalized icon."""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click

from iconwright_core.params import DEFAULT_PARAMS, PRESETS, CompositionParameters, apply_preset
from iconwright_core.protocol import EXPORT_FORMAT
from iconwright_compose.engine import render
from iconwright_compose.source import export_name, load_source


def build_params(preset: str | None = None, **overrides) -> CompositionParameters:
    """Defaults, then the preset bundle, then explicit per-field overrides."""
    params = DEFAULT_PARAMS
    if preset is not None:
        params = apply_preset(params, preset)
    given = {k: v for k, v in overrides.items() if v is not None}
    return replace(params, **given) if given else params


def compose_icon(
    source_path: Path | None,
    out_dir: Path,
    params: CompositionParameters,
) -> Path:
    """Compose one icon and write it as PNG into out_dir."""
    if source_path is None:
        print("Composing: <placeholder>")
        bitmap = None
    else:
        print(f"Composing: {source_path}")
        # 1. Decode source
        bitmap = load_source(source_path.read_bytes(), source_path.name)
        print(f"  Source: {bitmap.width}x{bitmap.height} {bitmap.mode}")

    # 2. Render
    icon = render(bitmap, params)

    # 3. Export
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / export_name(source_path.name if source_path else None)
    icon.save(out_path, EXPORT_FORMAT)

    print(f"PASS: Icon written to {out_path}")
    print(f"  Radius: {params.radius}  Margin: {params.margin}  Scale: {params.scale}")
    return out_path


@click.command()
@click.argument("source", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--out", "out_dir", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
              show_default=True, help="Output directory")
@click.option("--preset", type=click.Choice(sorted(PRESETS)), help="Apply a named parameter bundle first")
@click.option("--radius", type=float)
@click.option("--margin", type=float)
@click.option("--shadow-blur", type=float)
@click.option("--shadow-opacity", type=float)
@click.option("--shadow-y", type=float)
@click.option("--bg-color", type=str, help="Background color, e.g. '#1e293b'")
@click.option("--bg/--no-bg", "use_bg", default=None, help="Fill the icon background")
@click.option("--scale", type=float, help="Artwork scale inside the icon shape")
def main(source: Path | None, out_dir: Path, preset: str | None, **overrides) -> None:
    """Compose SOURCE (PNG, JPEG, icns, ...) into a normalized app icon."""
    try:
        params = build_params(preset, **overrides)
        compose_icon(source, out_dir, params)
    except Exception as e:
        # Fail closed with a single-line reason.
        print(f"FATAL: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
