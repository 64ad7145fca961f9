from __future__ import annotations

import logging
from collections import Counter

import click

from .embedder import capacity, embed, extract, required_blocks
from .errors import StegoError
from .image_utils import load_pixel_grid, psnr, save_pixel_grid
from .keyfile import KEY_FORMAT_VERSION, load_key, save_key
from .wavelet import Band


LOGGER = logging.getLogger("stegano_wavelet")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group(context_settings={"auto_envvar_prefix": "STEGANO_WAVELET"})
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str):
    """Stegano-Wavelet CLI: hide/extract an image inside another image's wavelet bands."""
    logging.basicConfig(level=getattr(logging, log_level.upper()), format="%(levelname)s: %(message)s")


@cli.command()
@click.option("--cover", "cover_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Cover image")
@click.option("--secret", "secret_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Image to hide")
@click.option("--out", "out_path", required=True, help="Output watermarked image (PPM/PNG/BMP/TIFF)")
@click.option("--key", "key_path", required=True, help="Output key file needed for extraction")
def hide(cover_path: str, secret_path: str, out_path: str, key_path: str):
    """Hide the secret image inside the cover image."""
    cover = load_pixel_grid(cover_path)
    secret = load_pixel_grid(secret_path)
    try:
        result = embed(cover, secret)
        save_pixel_grid(out_path, result.watermarked)
    except StegoError as e:
        raise click.ClickException(str(e))
    save_key(key_path, result.key)
    LOGGER.info("Wrote %s and %s", out_path, key_path)
    click.echo(f"Watermarked image saved to: {out_path}")
    click.echo(f"Key saved to: {key_path}")
    click.echo(f"PSNR vs cover: {psnr(cover, result.watermarked):.2f} dB")


@cli.command(name="extract")
@click.option("--in", "in_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Watermarked image")
@click.option("--key", "key_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Key file written by hide")
@click.option("--out", "out_path", required=True, help="Output recovered image (PPM/PNG/BMP/TIFF)")
def extract_cmd(in_path: str, key_path: str, out_path: str):
    """Recover the hidden image from a watermarked image and its key."""
    watermarked = load_pixel_grid(in_path)
    try:
        key = load_key(key_path)
        recovered = extract(watermarked, key.key1, key.key2, key.secret_width, key.secret_height)
        save_pixel_grid(out_path, recovered)
    except StegoError as e:
        raise click.ClickException(str(e))
    click.echo(f"Recovered image saved to: {out_path}")


@cli.command(name="capacity")
@click.option("--cover", "cover_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Cover image")
@click.option("--secret", "secret_path", type=click.Path(exists=True, dir_okay=False), help="Image to hide")
def capacity_cmd(cover_path: str, secret_path: str):
    """Report how many secret blocks the cover can take."""
    cover = load_pixel_grid(cover_path)
    available = capacity(cover)
    click.echo(f"Cover {cover.width}x{cover.height}: {available} detail blocks")
    if secret_path:
        secret = load_pixel_grid(secret_path)
        required = required_blocks(secret)
        verdict = "fits" if required <= available else "does not fit"
        click.echo(f"Secret {secret.width}x{secret.height}: {required} blocks ({verdict})")


@cli.command(name="show-key")
@click.option("--key", "key_path", required=True, type=click.Path(exists=True, dir_okay=False), help="Key file")
def show_key(key_path: str):
    """Print a key file's header and band usage."""
    try:
        key = load_key(key_path)
    except StegoError as e:
        raise click.ClickException(str(e))
    usage = Counter(entry.band for entry in key.key2)
    click.echo(f"Key format version: {KEY_FORMAT_VERSION}")
    click.echo(f"Secret size: {key.secret_width}x{key.secret_height}")
    click.echo(f"Blocks: {len(key.key1)}")
    for band in Band:
        click.echo(f"  {band.name}: {usage.get(band, 0)}")


if __name__ == "__main__":
    cli()
