import numpy as np
import pytest

from stegano_wavelet.blocks import block_count, decompose, recompose
from stegano_wavelet.errors import DimensionError


def numbered_grid(height, width):
    values = np.arange(height * width, dtype=np.int64).reshape(height, width)
    return np.stack([values, values + 100, values + 200], axis=-1)


class TestDecompose:
    def test_corner_order_and_scan_order(self):
        grid = numbered_grid(4, 4)
        blocks = decompose(grid)
        assert blocks.shape == (4, 4, 3)
        assert blocks[0, :, 0].tolist() == [0, 1, 4, 5]
        assert blocks[1, :, 0].tolist() == [2, 3, 6, 7]
        assert blocks[2, :, 0].tolist() == [8, 9, 12, 13]
        assert blocks[3, :, 0].tolist() == [10, 11, 14, 15]
        assert blocks[3, :, 2].tolist() == [210, 211, 214, 215]

    def test_odd_dimensions_drop_trailing_row_and_column(self):
        grid = numbered_grid(3, 5)
        blocks = decompose(grid)
        assert len(blocks) == block_count(5, 3) == 2
        assert blocks[0, :, 0].tolist() == [0, 1, 5, 6]
        assert blocks[1, :, 0].tolist() == [2, 3, 7, 8]

    def test_too_small_grid_has_no_blocks(self):
        assert decompose(numbered_grid(1, 1)).shape == (0, 4, 3)

    def test_blocks_are_independent_copies(self):
        grid = numbered_grid(2, 2)
        blocks = decompose(grid)
        blocks[0, 0, 0] = 999
        assert grid[0, 0, 0] == 0


class TestRecompose:
    @pytest.mark.parametrize("height,width", [(2, 2), (4, 6), (8, 4)])
    def test_inverts_decompose(self, height, width):
        grid = numbered_grid(height, width)
        assert np.array_equal(recompose(decompose(grid), width, height), grid)

    def test_odd_dimensions_zero_fill_without_base(self):
        grid = numbered_grid(3, 5)
        out = recompose(decompose(grid), 5, 3)
        assert np.array_equal(out[:2, :4], grid[:2, :4])
        assert not out[2].any()
        assert not out[:, 4].any()

    def test_odd_dimensions_keep_base(self):
        grid = numbered_grid(3, 5)
        blocks = decompose(grid)
        blocks[:] = -1
        out = recompose(blocks, 5, 3, base=grid)
        assert (out[:2, :4] == -1).all()
        assert np.array_equal(out[2], grid[2])
        assert np.array_equal(out[:, 4], grid[:, 4])

    def test_wrong_block_count(self):
        with pytest.raises(DimensionError):
            recompose(np.zeros((3, 4, 3)), 4, 4)
