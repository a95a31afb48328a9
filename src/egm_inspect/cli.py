from pathlib import Path

import click

from egm_core.protocol import DEFAULT_MAX_PAYLOAD_SIZE
from egm_decode import decode_manifest

from .export import export_tables
from .logic import canonical_json, summarize_manifest, verify_manifest

manifest_arg = click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
max_payload_opt = click.option(
    "--max-payload-size",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_PAYLOAD_SIZE,
    show_default=True,
    help="Largest inflated payload accepted, in bytes",
)


def _fatal(e: Exception):
    # Fail closed with a single-line reason.
    click.echo(f"FATAL: {e}", err=True)
    raise SystemExit(1)


@click.group()
def main():
    pass


@main.command("verify")
@manifest_arg
@max_payload_opt
def verify_cmd(path: Path, max_payload_size: int):
    try:
        result = verify_manifest(path, max_payload_size=max_payload_size)
        click.echo(canonical_json(result))
    except Exception as e:
        _fatal(e)
    if result["status"] != "PASS":
        raise SystemExit(1)


@main.command("show")
@manifest_arg
@max_payload_opt
@click.option("--files", "with_files", is_flag=True, help="Include the per-file listing")
def show_cmd(path: Path, max_payload_size: int, with_files: bool):
    try:
        manifest = decode_manifest(path.read_bytes(), max_payload_size=max_payload_size)
        click.echo(canonical_json(summarize_manifest(manifest, with_files=with_files)))
    except Exception as e:
        _fatal(e)


@main.command("export")
@manifest_arg
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@max_payload_opt
def export_cmd(path: Path, out: Path, max_payload_size: int):
    try:
        manifest = decode_manifest(path.read_bytes(), max_payload_size=max_payload_size)
        written = export_tables(manifest, out)
    except Exception as e:
        _fatal(e)
    click.echo(f"PASS: Tables written to {out}")
    for name, p in written.items():
        click.echo(f"  {name}: {p}")


if __name__ == "__main__":
    main()
