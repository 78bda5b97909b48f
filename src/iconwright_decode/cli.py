import json
import warnings
from pathlib import Path
import click
from .container import scan
from .errors import ContainerError

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

@click.group()
def main():
    pass

@main.command("container")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def container_cmd(path: Path):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = {"status": "PASS", **scan(path.read_bytes()).report()}
        except ContainerError as e:
            result = {"status": "FAIL", "error": {"code": e.code, "message": str(e)}}
    result["warnings"] = [str(w.message) for w in caught]
    click.echo(json.dumps(result, **CANONICAL_JSON_KW))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
