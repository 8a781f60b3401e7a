"""
Command-Line Interface for the oracle signer.

Runs registered computation apps, signs their results with the node key and
verifies signed responses.
"""

import json
import logging
import sys

import click
import trio
from rich.console import Console
from rich.table import Table

from oracle_signer import __version__, print_disclaimer
from oracle_signer.signing_protocol.exceptions import (
    ConfigurationError,
    SigningProtocolError,
)
from oracle_signer.signing_protocol.identity import SigningIdentity
from oracle_signer.signing_protocol.pipeline import SigningPipeline, verify_response
from oracle_signer.signing_protocol.registry import app_id_for, default_registry

console = Console()


def _parse_params(pairs):
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--param")
        params[key] = value
    return params


def _json_default(value):
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _load_identity():
    try:
        return SigningIdentity.from_env()
    except ConfigurationError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(2)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--manifest",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML manifest of extra apps to register",
)
@click.pass_context
def main(ctx, verbose, manifest):
    """
    Oracle signer - Schnorr-signed app responses over secp256k1.

    The signing key is read from $PRIVATE_KEY.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["manifest"] = manifest


@main.command()
@click.pass_context
def apps(ctx):
    """List registered apps and their ids."""
    try:
        registry = default_registry(ctx.obj.get("manifest"))
    except ConfigurationError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(2)

    table = Table(title="Registered apps")
    table.add_column("App", style="cyan")
    table.add_column("Methods")
    table.add_column("App id", overflow="fold")
    for name in registry.names():
        methods = ", ".join(registry.resolve(name).methods) or "*"
        table.add_row(name, methods, app_id_for(name))
    console.print(table)


@main.command()
@click.argument("app")
@click.argument("method")
@click.option("--param", "-p", "params", multiple=True, help="App parameter KEY=VALUE (repeatable)")
@click.option("--output", type=click.Path(dir_okay=False), help="Write the response JSON to a file")
@click.pass_context
def run(ctx, app, method, params, output):
    """Run APP.METHOD and print the signed response."""
    print_disclaimer()
    parsed = _parse_params(params)
    identity = _load_identity()

    try:
        pipeline = SigningPipeline(identity, default_registry(ctx.obj.get("manifest")))
        response = trio.run(pipeline.run, app, method, parsed)
    except SigningProtocolError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(click.style(f"✗ App rejected request: {e}", fg="red"), err=True)
        sys.exit(1)

    body = json.dumps(response.to_dict(), indent=2, default=_json_default)
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(body)
        click.echo(click.style(f"✓ Response written to {output}", fg="green"))
    else:
        console.print_json(body)


@main.command()
@click.argument("response_file", type=click.File("r"))
@click.option("--owner", help="Require a signature from this address")
def verify(response_file, owner):
    """Verify a signed response JSON file."""
    try:
        data = json.load(response_file)
    except json.JSONDecodeError as e:
        click.echo(click.style(f"✗ Not JSON: {e}", fg="red"), err=True)
        sys.exit(2)

    if verify_response(data, expected_owner=owner):
        click.echo(click.style("✓ Signature valid", fg="green"))
    else:
        click.echo(click.style("✗ Signature INVALID", fg="red"), err=True)
        sys.exit(1)


@main.command()
@click.option("--full", is_flag=True, help="Include address and compressed encoding")
def address(full):
    """Show the address and public key of $PRIVATE_KEY."""
    identity = _load_identity()
    click.echo(identity.address)
    console.print_json(json.dumps(identity.public_key_view(minimal=not full)))


@main.command()
def keygen():
    """Generate a new private key (printed to stdout)."""
    print_disclaimer()
    identity = SigningIdentity.generate()
    click.echo(f"PRIVATE_KEY={identity.private_key_hex()}")
    click.echo(f"# address {identity.address}")


if __name__ == "__main__":
    main()
