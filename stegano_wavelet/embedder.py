from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .blocks import block_count, decompose, recompose
from .channels import COEFFICIENT_DTYPE, subtract
from .errors import CapacityError, DimensionError, KeyMismatchError, NoCandidateError
from .image_utils import PixelGrid
from .keyfile import KeyEntry, StegoKey, as_entries
from .matching import match_all, nearest
from .wavelet import Band, CoefficientImage, forward_transform, inverse_transform


LOGGER = logging.getLogger("stegano_wavelet")

# Smallest side whose LL band still holds one complete 2x2 block.
MIN_IMAGE_SIDE = 4


class DetailPool:
    """Mutable LH/HL/HH block stacks owned by a single embedding call.

    A block that has received a difference block is claimed and never
    offered as a candidate again.
    """

    def __init__(self, coeffs: CoefficientImage):
        self.blocks: Dict[Band, np.ndarray] = {band: decompose(coeffs.band(band)) for band in Band}
        self._claimed = {band: np.zeros(len(self.blocks[band]), dtype=bool) for band in Band}

    @property
    def free(self) -> int:
        return sum(int(np.count_nonzero(~claimed)) for claimed in self._claimed.values())

    def best_fit(self, block: np.ndarray) -> KeyEntry:
        """Closest unclaimed block over all three bands, by (error, band, index)."""
        candidates: List[Tuple[float, Band, int]] = []
        for band in Band:
            available = ~self._claimed[band]
            if not available.any():
                continue
            match = nearest(block, self.blocks[band], available=available)
            candidates.append((match.error, band, match.index))
        if not candidates:
            raise NoCandidateError("No unclaimed detail block left in any band")
        _error, band, index = min(candidates)
        return KeyEntry(band, index)

    def write(self, entry: KeyEntry, block: np.ndarray) -> None:
        self.blocks[entry.band][entry.index] = block
        self._claimed[entry.band][entry.index] = True


@dataclass
class EmbedResult:
    watermarked: PixelGrid
    key1: List[int]
    key2: List[KeyEntry]
    secret_width: int
    secret_height: int
    # watermarked bands before the inverse transform rounds them to pixels
    coefficients: CoefficientImage

    @property
    def key(self) -> StegoKey:
        return StegoKey(tuple(self.key1), tuple(self.key2), self.secret_width, self.secret_height)


def capacity(cover: PixelGrid) -> int:
    """Number of detail blocks the cover offers (LH + HL + HH)."""
    return len(Band) * block_count(cover.width // 2, cover.height // 2)


def required_blocks(secret: PixelGrid) -> int:
    """Number of LL blocks the secret contributes, one detail block each."""
    return block_count(secret.width // 2, secret.height // 2)


def _check_side(name: str, width: int, height: int) -> None:
    if width < MIN_IMAGE_SIDE or height < MIN_IMAGE_SIDE:
        raise DimensionError(
            f"{name} image must be at least {MIN_IMAGE_SIDE}x{MIN_IMAGE_SIDE}, got {width}x{height}: "
            f"its LL band is {width // 2}x{height // 2} and needs at least one complete 2x2 block"
        )


def check_capacity(cover: CoefficientImage, secret: CoefficientImage) -> None:
    _check_side("Cover", cover.width, cover.height)
    _check_side("Secret", secret.width, secret.height)
    required = block_count(secret.band_width, secret.band_height)
    available = len(Band) * block_count(cover.band_width, cover.band_height)
    if required > available:
        raise CapacityError(required, available)


def hide_coefficients(
    cover: CoefficientImage, secret: CoefficientImage
) -> Tuple[CoefficientImage, List[int], List[KeyEntry]]:
    """Fuse the secret's LL band into the cover's detail bands.

    Difference blocks are placed in increasing secret-block order; each
    placement changes the pool later blocks are matched against.
    """
    check_capacity(cover, secret)

    cover_ll = decompose(cover.ll)
    secret_ll = decompose(secret.ll)
    key1 = match_all(secret_ll, cover_ll)
    differences = subtract(secret_ll, cover_ll[key1])

    pool = DetailPool(cover)
    key2: List[KeyEntry] = []
    for diff in differences:
        entry = pool.best_fit(diff)
        pool.write(entry, diff)
        key2.append(entry)
    LOGGER.debug(
        "Placed %d difference blocks (LH=%d, HL=%d, HH=%d)",
        len(key2),
        *(sum(1 for e in key2 if e.band == band) for band in Band),
    )

    w, h = cover.band_width, cover.band_height
    marked = CoefficientImage(
        cover.ll,
        recompose(pool.blocks[Band.LH], w, h, base=cover.lh),
        recompose(pool.blocks[Band.HL], w, h, base=cover.hl),
        recompose(pool.blocks[Band.HH], w, h, base=cover.hh),
        cover.width,
        cover.height,
    )
    return marked, key1, key2


def embed(cover: PixelGrid, secret: PixelGrid) -> EmbedResult:
    """Hide ``secret`` inside ``cover`` and return the watermarked grid plus key."""
    cover_coeffs = forward_transform(cover)
    secret_coeffs = forward_transform(secret)
    marked, key1, key2 = hide_coefficients(cover_coeffs, secret_coeffs)

    watermarked = inverse_transform(marked)
    # the unpaired trailing row/column never entered the transform
    rows, cols = cover.height - cover.height % 2, cover.width - cover.width % 2
    watermarked.pixels[rows:, :] = cover.pixels[rows:, :]
    watermarked.pixels[:, cols:] = cover.pixels[:, cols:]

    LOGGER.debug(
        "Embedded %dx%d secret into %dx%d cover", secret.width, secret.height, cover.width, cover.height
    )
    return EmbedResult(watermarked, key1, key2, secret.width, secret.height, marked)


def recover_coefficients(
    marked: CoefficientImage,
    key1: Sequence[int],
    key2: Sequence,
    secret_width: int,
    secret_height: int,
) -> CoefficientImage:
    """Rebuild the secret's coefficient image from watermarked bands and a key."""
    entries = as_entries(key2)
    key1 = [int(i) for i in key1]
    if len(key1) != len(entries):
        raise KeyMismatchError(f"key1 has {len(key1)} entries but key2 has {len(entries)}")
    w, h = secret_width // 2, secret_height // 2
    expected = block_count(w, h)
    if len(key1) != expected:
        raise KeyMismatchError(
            f"A {secret_width}x{secret_height} secret has {expected} blocks but the key has {len(key1)}"
        )

    marked_ll = decompose(marked.ll)
    marked_details = {band: decompose(marked.band(band)) for band in Band}
    for i in key1:
        if not 0 <= i < len(marked_ll):
            raise KeyMismatchError(f"key1 index {i} outside the {len(marked_ll)} LL blocks")
    for entry in entries:
        size = len(marked_details[entry.band])
        if size == 0:
            raise KeyMismatchError(f"key2 references band {entry.band.name}, which has no blocks")
        if not 0 <= entry.index < size:
            raise KeyMismatchError(
                f"key2 index {entry.index} outside the {size} {entry.band.name} blocks"
            )

    channels = marked.ll.shape[2]
    buffers = {band: np.zeros((expected, 4, channels), dtype=COEFFICIENT_DTYPE) for band in Band}
    for i, entry in enumerate(entries):
        buffers[entry.band][i] = marked_details[entry.band][entry.index]
    ll_blocks = marked_ll[key1] if key1 else np.zeros((0, 4, channels), dtype=COEFFICIENT_DTYPE)

    return CoefficientImage(
        recompose(ll_blocks, w, h),
        recompose(buffers[Band.LH], w, h),
        recompose(buffers[Band.HL], w, h),
        recompose(buffers[Band.HH], w, h),
        secret_width,
        secret_height,
    )


def extract_coefficients(
    watermarked: PixelGrid,
    key1: Sequence[int],
    key2: Sequence,
    secret_width: int,
    secret_height: int,
) -> CoefficientImage:
    return recover_coefficients(forward_transform(watermarked), key1, key2, secret_width, secret_height)


def extract(
    watermarked: PixelGrid,
    key1: Sequence[int],
    key2: Sequence,
    secret_width: int,
    secret_height: int,
) -> PixelGrid:
    """Recover the hidden image from a watermarked grid and its key.

    The detail bands come back exactly as embedded; the LL band is the
    cover block each secret block was matched to.
    """
    coeffs = extract_coefficients(watermarked, key1, key2, secret_width, secret_height)
    LOGGER.debug("Recovered %dx%d secret from %d blocks", secret_width, secret_height, len(key1))
    return inverse_transform(coeffs)
