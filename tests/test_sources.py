import struct

import librosa
import numpy as np
import pytest
import soundfile as sf

from audiospectrogram.errors import FormatError, UnsupportedEncoding
from audiospectrogram.model import duration
from audiospectrogram.sources import CodecSource, WaveSource, detect_container, read_audio
from audiospectrogram.wave import read_wave_file


@pytest.mark.parametrize(
    "head, expected",
    [
        (b"RIFF\x00\x00\x00\x00WAVE", "wav"),
        (b"RIFX\x00\x00\x00\x00WAVE", "wav"),
        (b"fLaC\x00\x00\x00\x22", "flac"),
        (b"OggS\x00\x02", "ogg"),
        (b"FORM\x00\x00\x00\x00AIFF", "aiff"),
        (b"ID3\x04\x00", "mp3"),
        (b"\xff\xfb\x90\x00", "mp3"),
        (b"%PDF-1.4", None),
        (b"", None),
    ],
)
def test_detect_container(tmp_path, head, expected):
    path = tmp_path / "sample.bin"
    path.write_bytes(head)
    assert detect_container(path) == expected


def test_wav_goes_through_container_decoder(tmp_path, make_wav):
    path = tmp_path / "stereo.wav"
    path.write_bytes(make_wav(struct.pack("<4h", 1, 2, 3, 4), channels=2, sample_rate=22050, bits=16))
    source = read_audio(path)
    assert isinstance(source, WaveSource)
    assert (source.info.channels, source.info.sample_rate, source.info.bits_per_sample) == (2, 22050, 16)
    assert source.frames.shape == (2, 2)


def test_wav_source_needs_samples(tmp_path, make_wav):
    path = tmp_path / "a.wav"
    path.write_bytes(make_wav(b"\x00\x00"))
    with pytest.raises(FormatError):
        WaveSource(read_wave_file(path, header_only=True))


def test_flac_goes_through_codec(tmp_path):
    t = np.arange(4000) / 8000
    data = np.column_stack([0.5 * np.sin(2 * np.pi * 440 * t), np.zeros_like(t)])
    path = tmp_path / "tone.flac"
    sf.write(str(path), data, 8000, format="FLAC", subtype="PCM_16")

    source = read_audio(path)
    assert isinstance(source, CodecSource)
    assert (source.info.channels, source.info.sample_rate, source.info.bits_per_sample) == (2, 8000, 16)
    assert source.frames.shape == (4000, 2)
    np.testing.assert_allclose(source.frames, data, atol=1e-3)
    assert duration(source) == pytest.approx(0.5)


def test_corrupt_codec_file(tmp_path):
    path = tmp_path / "broken.flac"
    path.write_bytes(b"fLaC" + b"\x00" * 64)
    with pytest.raises(FormatError):
        read_audio(path)


def test_unknown_container(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not audio")
    with pytest.raises(UnsupportedEncoding):
        read_audio(path)


def test_codec_source_checks_shape():
    from audiospectrogram.model import AudioInfo

    with pytest.raises(FormatError):
        CodecSource(AudioInfo(channels=2, sample_rate=8000, bits_per_sample=16), np.zeros((10, 1)))


def test_codec_decode_failure_is_a_format_error(tmp_path, monkeypatch):
    path = tmp_path / "tone.flac"
    sf.write(str(path), np.zeros(1000), 8000, format="FLAC", subtype="PCM_16")

    def fail(*args, **kwargs):
        raise RuntimeError("decoder gave up")

    monkeypatch.setattr(librosa, "load", fail)
    with pytest.raises(FormatError, match="decoder gave up"):
        read_audio(path)
