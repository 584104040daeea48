"""Schema CLI commands: validate and formats."""

import json
import sys
from pathlib import Path

import click

from ruleforge.config import ValidationConfig
from ruleforge.validation.schema import SchemaValidator


def _make_validator() -> SchemaValidator:
    try:
        config = ValidationConfig.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(2)
    return SchemaValidator(config=config)


@click.group()
def schema():
    """JSON Schema commands."""
    pass


@schema.command()
@click.option(
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(path_type=Path),
    help="Schema file (.json, .yaml or .yml).",
)
@click.option(
    "--instance",
    "instance_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON document to validate. Reads stdin when omitted.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
def validate(schema_path: Path, instance_path: Path | None, as_json: bool):
    """Validate a JSON document against a schema."""
    validator = _make_validator()

    if instance_path is not None:
        instance = instance_path.read_text(encoding="utf-8")
    else:
        instance = sys.stdin.read()

    result = validator.validate_schema_file(None, instance, schema_path)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        click.echo(click.style("Document is valid.", fg="green", bold=True))
    else:
        for field, codes in result.errors.items():
            for code in codes:
                click.echo(click.style(f"{field}: {code}", fg="red"))
        for message in result.global_errors:
            click.echo(click.style(message, fg="red"))
        click.echo(
            click.style(f"\n{result.error_count()} error(s) found", fg="red", bold=True)
        )

    if not result.valid:
        raise SystemExit(1)


@schema.command("formats")
def formats_cmd():
    """List the registered format names."""
    validator = _make_validator()
    for name in sorted(validator.format_validators()):
        click.echo(name)
