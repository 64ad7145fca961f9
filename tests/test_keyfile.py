import pytest

from stegano_wavelet.errors import KeyFormatError, KeyMismatchError
from stegano_wavelet.keyfile import (
    KEY_MAGIC,
    KeyEntry,
    StegoKey,
    key_from_bytes,
    key_to_bytes,
    load_key,
    save_key,
)
from stegano_wavelet.wavelet import Band


def sample_key():
    return StegoKey((3, 0, 70000), ((0, 5), (Band.HH, 1), (Band.HL, 2)), 12, 8)


class TestStegoKey:
    def test_entries_are_normalized(self):
        key = sample_key()
        assert key.key2[0] == KeyEntry(Band.LH, 5)
        assert isinstance(key.key2[0].band, Band)

    def test_length_mismatch(self):
        with pytest.raises(KeyMismatchError):
            StegoKey((1, 2), ((0, 0),), 4, 4)

    @pytest.mark.parametrize(
        "key2,message",
        [
            (((0, "x"),), "Bad block index"),
            (((0, None),), "Bad block index"),
            ((("LH", 0),), "Unknown band tag"),
            ((5,), "not a \\(band, index\\) pair"),
            (((0, 1, 2),), "not a \\(band, index\\) pair"),
        ],
        ids=["text-index", "none-index", "text-band", "not-a-pair", "triple"],
    )
    def test_malformed_entries(self, key2, message):
        with pytest.raises(KeyMismatchError, match=message):
            StegoKey((1,), key2, 4, 4)

    def test_unknown_band(self):
        with pytest.raises(KeyMismatchError):
            StegoKey((1,), ((7, 0),), 4, 4)


class TestSerialization:
    def test_layout(self):
        blob = key_to_bytes(sample_key())
        assert blob[:4] == KEY_MAGIC
        assert blob[4] == 1
        assert int.from_bytes(blob[5:9], "big") == 12
        assert int.from_bytes(blob[9:13], "big") == 8
        assert int.from_bytes(blob[13:17], "big") == 3
        assert len(blob) == 17 + 3 * 9
        # second entry: key1=0, band HH, index 1
        assert blob[26:35] == (0).to_bytes(4, "big") + bytes([2]) + (1).to_bytes(4, "big")

    def test_parse_inverts_serialize(self):
        assert key_from_bytes(key_to_bytes(sample_key())) == sample_key()

    def test_empty_key(self):
        key = StegoKey((), (), 2, 2)
        assert key_from_bytes(key_to_bytes(key)) == key

    def test_file_helpers(self, tmp_path):
        path = str(tmp_path / "secret.key")
        save_key(path, sample_key())
        assert load_key(path) == sample_key()

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda b: b[:10],
            lambda b: b"XXXX" + b[4:],
            lambda b: b[:4] + bytes([9]) + b[5:],
            lambda b: b[:-1],
            lambda b: b + b"\x00",
            lambda b: b[:21] + bytes([3]) + b[22:],
        ],
        ids=["short-header", "bad-magic", "bad-version", "truncated", "trailing", "bad-band"],
    )
    def test_malformed(self, mutate):
        with pytest.raises(KeyFormatError):
            key_from_bytes(mutate(key_to_bytes(sample_key())))
