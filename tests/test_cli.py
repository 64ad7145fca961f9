import numpy as np
from click.testing import CliRunner
from PIL import Image

from stegano_wavelet.cli import cli
from stegano_wavelet.image_utils import load_pixel_grid
from stegano_wavelet.keyfile import load_key


def write_image(path, width, height, seed):
    rng = np.random.default_rng(seed)
    Image.fromarray(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)).save(path)
    return str(path)


class TestCli:
    def test_hide_then_extract(self, tmp_path):
        cover = write_image(tmp_path / "cover.ppm", 32, 32, 1)
        secret = write_image(tmp_path / "secret.png", 8, 8, 2)
        out = str(tmp_path / "marked.ppm")
        key = str(tmp_path / "marked.key")
        runner = CliRunner()

        result = runner.invoke(cli, ["hide", "--cover", cover, "--secret", secret, "--out", out, "--key", key])
        assert result.exit_code == 0, result.output
        assert "PSNR vs cover" in result.output
        assert load_key(key).secret_width == 8

        recovered = str(tmp_path / "recovered.png")
        result = runner.invoke(cli, ["extract", "--in", out, "--key", key, "--out", recovered])
        assert result.exit_code == 0, result.output
        grid = load_pixel_grid(recovered)
        assert (grid.width, grid.height) == (8, 8)

    def test_hide_reports_capacity_error(self, tmp_path):
        cover = write_image(tmp_path / "cover.ppm", 4, 4, 1)
        secret = write_image(tmp_path / "secret.ppm", 16, 16, 2)
        out = tmp_path / "marked.ppm"
        key = tmp_path / "marked.key"
        result = CliRunner().invoke(
            cli, ["hide", "--cover", cover, "--secret", secret, "--out", str(out), "--key", str(key)]
        )
        assert result.exit_code != 0
        assert "cover only has 3" in result.output
        assert not out.exists()
        assert not key.exists()

    def test_hide_rejects_lossy_output(self, tmp_path):
        cover = write_image(tmp_path / "cover.ppm", 16, 16, 1)
        secret = write_image(tmp_path / "secret.ppm", 4, 4, 2)
        key = tmp_path / "marked.key"
        result = CliRunner().invoke(
            cli, ["hide", "--cover", cover, "--secret", secret, "--out", str(tmp_path / "m.jpg"), "--key", str(key)]
        )
        assert result.exit_code != 0
        assert not key.exists()

    def test_capacity(self, tmp_path):
        cover = write_image(tmp_path / "cover.ppm", 8, 8, 1)
        secret = write_image(tmp_path / "secret.ppm", 16, 16, 2)
        result = CliRunner().invoke(cli, ["capacity", "--cover", cover, "--secret", secret])
        assert result.exit_code == 0, result.output
        assert "12 detail blocks" in result.output
        assert "16 blocks (does not fit)" in result.output

    def test_show_key(self, tmp_path):
        cover = write_image(tmp_path / "cover.ppm", 16, 16, 1)
        secret = write_image(tmp_path / "secret.ppm", 8, 8, 2)
        key = str(tmp_path / "k.key")
        runner = CliRunner()
        runner.invoke(cli, ["hide", "--cover", cover, "--secret", secret, "--out", str(tmp_path / "m.png"), "--key", key])
        result = runner.invoke(cli, ["show-key", "--key", key])
        assert result.exit_code == 0, result.output
        assert "Secret size: 8x8" in result.output
        assert "Blocks: 4" in result.output

    def test_show_key_rejects_garbage(self, tmp_path):
        key = tmp_path / "bad.key"
        key.write_bytes(b"not a key")
        result = CliRunner().invoke(cli, ["show-key", "--key", str(key)])
        assert result.exit_code != 0
        assert "too short" in result.output
