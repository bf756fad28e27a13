import base64

from sonatalab.cipher.cbc import encrypt_stream
from sonatalab.cli import decode_text, encode_bytes, main

IV = "0011223344556677"


def _field(out: str, name: str) -> str:
    for line in out.splitlines():
        if line.startswith(f"{name}: "):
            return line.split(": ", 1)[1]
    raise AssertionError(f"{name} not in output:\n{out}")


def test_encode_decode_text():
    data = bytes(range(10))
    assert decode_text(encode_bytes(data, "hex"), "hex") == data
    assert decode_text(encode_bytes(data, "base64"), "base64") == data
    assert decode_text("00 11\n22", "hex") == b"\x00\x11\x22"


def test_encrypt_matches_library(capsys):
    assert main(["encrypt", "--key", "test1234", "--text", "hello", "--iv", IV]) == 0
    out = capsys.readouterr().out
    assert _field(out, "iv") == IV
    expected = encrypt_stream(b"hello", "test1234", bytes.fromhex(IV), 8)
    assert _field(out, "ciphertext") == expected.hex()


def test_encrypt_then_decrypt(capsys):
    main(["encrypt", "--key", "k", "--rounds", "6", "--text", "Hola mundo", "--encoding", "base64"])
    out = capsys.readouterr().out
    iv = _field(out, "iv")
    ct = _field(out, "ciphertext")
    base64.b64decode(ct, validate=True)

    rc = main(["decrypt", "--key", "k", "--rounds", "6", "--iv", iv, "--encoding", "base64", ct])
    assert rc == 0
    assert capsys.readouterr().out.strip() == "Hola mundo"


def test_decrypt_raw(capsys):
    ct = encrypt_stream(b"\x00\xff", "k", bytes.fromhex(IV), 8).hex()
    assert main(["decrypt", "--key", "k", "--iv", IV, "--raw", ct]) == 0
    assert capsys.readouterr().out.strip() == "00ff"


def test_encrypt_trace_json(capsys):
    assert main(["encrypt", "--key", "k", "--rounds", "4", "--hex", "00" * 8, "--iv", IV, "--trace"]) == 0
    out = capsys.readouterr().out
    assert '"sbox"' in out
    assert '"after_sub"' in out


def test_rounds_outside_range_rejected(capsys):
    assert main(["encrypt", "--key", "k", "--rounds", "3", "--text", "x"]) == 2
    assert "Invalid parameters" in capsys.readouterr().err


def test_bad_ciphertext_length(capsys):
    assert main(["decrypt", "--key", "k", "--iv", IV, "00112233"]) == 2
    assert "Error" in capsys.readouterr().err


def test_bad_hex_reported(capsys):
    assert main(["decrypt", "--key", "k", "--iv", "zz", "00"]) == 2


def test_avalanche_single(capsys):
    assert main(["avalanche", "--key", "test1234", "--bit", "5"]) == 0
    assert "bits changed" in capsys.readouterr().out


def test_evaluate_writes_report(capsys, tmp_path):
    rc = main([
        "evaluate", "--rounds", "4", "--vectors", "3", "--trials", "2",
        "--output-dir", str(tmp_path),
    ])
    assert rc == 0
    assert "Roundtrip Tests" in capsys.readouterr().out
    assert len(list(tmp_path.glob("*/report.json"))) == 1
    assert len(list(tmp_path.glob("*/summary.txt"))) == 1


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------

def test_avalanche_key_bit_past_empty_key(capsys):
    assert main(["avalanche", "--target", "key"]) == 2
    assert "bit_index out of range" in capsys.readouterr().err


def test_avalanche_plaintext_bit_past_block(capsys):
    assert main(["avalanche", "--key", "test1234", "--bit", "64"]) == 2
    assert "Invalid bit index" in capsys.readouterr().err


def test_avalanche_trials_respect_round_range(capsys):
    assert main(["avalanche", "--trials", "1", "--rounds", "40"]) == 2
    captured = capsys.readouterr()
    assert "4..12" in captured.err
    assert "avalanche(" not in captured.out


def test_evaluate_respects_round_range(capsys, tmp_path):
    rc = main([
        "evaluate", "--rounds", "8", "1", "--vectors", "2", "--trials", "1",
        "--output-dir", str(tmp_path),
    ])
    assert rc == 2
    assert "4..12" in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_evaluate_bare_output_dir_uses_runs_dir(capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("SONATA_RUNS_DIR", str(tmp_path / "runs"))
    rc = main(["evaluate", "--rounds", "4", "--vectors", "2", "--trials", "1", "--output-dir"])
    assert rc == 0
    assert len(list((tmp_path / "runs").glob("*/report.json"))) == 1
    assert str(tmp_path / "runs") in capsys.readouterr().out
