"""
Schnorr-signed oracle responses over secp256k1.

⚠️ DRAFT — requires crypto review before production use
"""

import click

__version__ = "0.1.0"

DISCLAIMER = (
    "⚠️  DRAFT: signatures produced by this tool have not been through a "
    "cryptographic review. Do not rely on them in production."
)


def print_disclaimer() -> None:
    click.echo(click.style(DISCLAIMER, fg="yellow"), err=True)
