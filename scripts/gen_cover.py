from __future__ import annotations

from pathlib import Path
import numpy as np
from PIL import Image


def make_cover(h: int = 256, w: int = 256) -> np.ndarray:
    # Orange gradient with noise; texture gives the detail bands varied blocks to match
    y = np.linspace(0, 1, h, dtype=np.float32)[:, None]
    x = np.linspace(0, 1, w, dtype=np.float32)[None, :]
    grad = (0.9 * (1 - y) + 0.1).astype(np.float32)
    rng = np.random.default_rng(42)
    noise = rng.normal(loc=0.0, scale=0.08, size=(h, w)).astype(np.float32)
    vignette = (0.85 + 0.15 * (x * (1 - x) + y * (1 - y))).astype(np.float32)
    base = np.clip(grad * vignette + noise, 0, 1)
    rgb = np.stack([base, 0.45 * base, 0.1 * base], axis=2)
    return (np.clip(rgb, 0, 1) * 255).astype(np.uint8)


def make_secret(h: int = 64, w: int = 64) -> np.ndarray:
    # Blue/white checkerboard
    yy, xx = np.mgrid[0:h, 0:w]
    checker = ((yy // 8 + xx // 8) % 2).astype(np.uint8)
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[checker == 1] = (240, 240, 240)
    img[checker == 0] = (30, 60, 200)
    return img


def main(out_dir: Path):
    out_dir.mkdir(parents=True, exist_ok=True)
    Image.fromarray(make_cover()).save(out_dir / "cover.ppm")
    Image.fromarray(make_secret()).save(out_dir / "secret.ppm")


if __name__ == "__main__":
    out = Path("images")
    main(out)
    print(f"Wrote {(out / 'cover.ppm').resolve()} and {(out / 'secret.ppm').resolve()}")
