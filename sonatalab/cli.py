"""Command-line entry point for the SONATA cipher lab.

Usage:
    sonata encrypt --key test1234 --text "hello world"
    sonata decrypt --key test1234 --iv 0011223344556677 <ciphertext-hex>
    sonata avalanche --key test1234 --plaintext 0000000000000000 --bit 5
    sonata avalanche --trials 200 --target key
    sonata evaluate --rounds 4 8 12 --output-dir
    sonata evaluate --rounds 8 --output-dir /tmp/sonata-runs

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from sonatalab.cipher.cbc import decrypt_stream, encrypt_stream, encrypt_stream_traced, random_iv
from sonatalab.cipher.engine import SonataCipher
from sonatalab.cipher.errors import SonataError
from sonatalab.cipher.params import CipherParams, check_round_range
from sonatalab.config import load_settings
from sonatalab.evaluation.avalanche import avalanche_trials, compute_sac, measure_avalanche
from sonatalab.evaluation.report import EvaluationReport
from sonatalab.evaluation.roundtrip import run_roundtrip_tests
from sonatalab.evaluation.sbox_analysis import analyze_key_sbox
from sonatalab.utils.repro import make_run_dir, set_global_seed, write_json, write_text

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Text encodings
# ---------------------------------------------------------------------------

def encode_bytes(data: bytes, encoding: str) -> str:
    if encoding == "base64":
        return base64.b64encode(data).decode("ascii")
    return data.hex()


def decode_text(text: str, encoding: str) -> bytes:
    """Decode hex or base64 text, ignoring whitespace."""
    cleaned = "".join(text.split())
    if encoding == "base64":
        return base64.b64decode(cleaned, validate=True)
    return bytes.fromhex(cleaned)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def _cmd_encrypt(args: argparse.Namespace) -> int:
    iv = bytes.fromhex(args.iv) if args.iv else random_iv()
    params = CipherParams(key=args.key, rounds=args.rounds, iv=iv)
    plaintext = bytes.fromhex(args.hex) if args.hex is not None else args.text.encode("utf-8")

    if args.trace:
        res = encrypt_stream_traced(plaintext, params.key, params.iv, params.rounds)
        ciphertext = res.ciphertext
    else:
        ciphertext = encrypt_stream(plaintext, params.key, params.iv, params.rounds)

    print(f"iv: {params.iv.hex()}")
    print(f"ciphertext: {encode_bytes(ciphertext, args.encoding)}")
    if args.trace:
        print(json.dumps(
            {
                "sbox": list(res.sbox),
                "pbox": list(res.pbox),
                "rounds": [t.to_dict() for t in res.traces],
            },
            indent=2,
        ))
    return 0


def _cmd_decrypt(args: argparse.Namespace) -> int:
    params = CipherParams(key=args.key, rounds=args.rounds, iv=bytes.fromhex(args.iv))
    ciphertext = decode_text(args.ciphertext, args.encoding)
    plaintext = decrypt_stream(ciphertext, params.key, params.iv, params.rounds, strict=args.strict)
    if args.raw:
        print(plaintext.hex())
    else:
        print(plaintext.decode("utf-8", errors="replace"))
    return 0


def _cmd_avalanche(args: argparse.Namespace) -> int:
    settings = load_settings()
    if args.trials:
        check_round_range(args.rounds, settings)
        stats = avalanche_trials(
            args.rounds,
            trials=args.trials,
            target=args.target,
            seed=args.seed if args.seed is not None else settings.global_seed,
        )
        print(stats.summary())
        return 0

    params = CipherParams(key=args.key, rounds=args.rounds, iv=bytes.fromhex(args.iv))
    res = measure_avalanche(
        bytes.fromhex(args.plaintext),
        params.key,
        params.iv,
        params.rounds,
        target=args.target,
        bit_index=args.bit,
    )
    print(f"baseline: {res.baseline_hex}")
    print(f"flipped:  {res.flipped_hex}")
    print(f"per-byte: {' '.join(str(d) for d in res.per_byte)}")
    print(res.summary())
    return 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    settings = load_settings()
    seed = args.seed if args.seed is not None else settings.global_seed
    for rounds in args.rounds:
        check_round_range(rounds, settings)
    set_global_seed(seed)

    report = EvaluationReport()
    for rounds in args.rounds:
        logger.info("Evaluating %d rounds", rounds)
        report.roundtrip_results.append(
            run_roundtrip_tests(rounds, num_vectors=args.vectors or settings.roundtrip_vectors, seed=seed)
        )
        for target in ("plaintext", "key"):
            report.avalanche_results.append(
                avalanche_trials(rounds, trials=args.trials or settings.avalanche_trials, target=target, seed=seed)
            )
        if args.sac:
            cipher = SonataCipher(rounds=rounds)
            for input_type in ("plaintext", "key"):
                report.sac_results.append(compute_sac(
                    cipher,
                    rounds=rounds,
                    input_type=input_type,
                    trials=settings.sac_trials,
                    seed=seed,
                ))
    report.sbox_result = analyze_key_sbox(args.key, label=f"sbox({args.key!r})")

    print(report.to_summary())
    if args.output_dir:
        paths = make_run_dir(args.output_dir, "evaluation")
        write_json(paths.report_json, report.to_dict())
        write_text(paths.summary_txt, report.to_summary())
        print(f"\nReport written to {paths.run_dir}")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="sonata",
        description="SONATA didactic block cipher (CBC) and avalanche lab",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--key", default="", help="Key text (UTF-8)")
        p.add_argument(
            "--rounds", type=int, default=settings.default_rounds,
            help=f"Round count ({settings.min_rounds}..{settings.max_rounds}, default: {settings.default_rounds})",
        )

    p_enc = sub.add_parser("encrypt", help="Encrypt text or hex bytes")
    _common(p_enc)
    src = p_enc.add_mutually_exclusive_group(required=True)
    src.add_argument("--text", help="Plaintext as UTF-8 text")
    src.add_argument("--hex", help="Plaintext as hex")
    p_enc.add_argument("--iv", default=None, help="IV as 16 hex chars (default: random)")
    p_enc.add_argument("--encoding", choices=("hex", "base64"), default="hex")
    p_enc.add_argument("--trace", action="store_true", help="Print per-round traces as JSON")
    p_enc.set_defaults(func=_cmd_encrypt)

    p_dec = sub.add_parser("decrypt", help="Decrypt hex or base64 ciphertext")
    _common(p_dec)
    p_dec.add_argument("ciphertext")
    p_dec.add_argument("--iv", required=True, help="IV used at encryption (16 hex chars)")
    p_dec.add_argument("--encoding", choices=("hex", "base64"), default="hex")
    p_dec.add_argument("--strict", action="store_true", help="Fail on invalid padding")
    p_dec.add_argument("--raw", action="store_true", help="Print plaintext as hex")
    p_dec.set_defaults(func=_cmd_decrypt)

    p_av = sub.add_parser("avalanche", help="Flip one bit and compare ciphertexts")
    _common(p_av)
    p_av.add_argument("--plaintext", default="00" * 8, help="Plaintext as hex")
    p_av.add_argument("--iv", default="00" * 8, help="IV as hex")
    p_av.add_argument("--target", choices=("plaintext", "key"), default="plaintext")
    p_av.add_argument("--bit", type=int, default=0, help="Bit index (0 = MSB of byte 0)")
    p_av.add_argument("--trials", type=int, default=0, help="Run N random trials instead")
    p_av.add_argument("--seed", type=int, default=None)
    p_av.set_defaults(func=_cmd_avalanche)

    p_ev = sub.add_parser("evaluate", help="Roundtrip, avalanche and S-box report")
    p_ev.add_argument("--key", default="test1234", help="Key whose S-box is analyzed")
    p_ev.add_argument("--rounds", type=int, nargs="+", default=[settings.default_rounds])
    p_ev.add_argument("--vectors", type=int, default=None, help="Roundtrip vectors per round count")
    p_ev.add_argument("--trials", type=int, default=None, help="Avalanche trials per target")
    p_ev.add_argument("--sac", action="store_true", help="Also run the per-bit SAC analysis")
    p_ev.add_argument("--seed", type=int, default=None)
    p_ev.add_argument(
        "--output-dir", nargs="?", const=settings.runs_dir, default=None,
        help=f"Write report.json under this directory (bare flag: {settings.runs_dir})",
    )
    p_ev.set_defaults(func=_cmd_evaluate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else load_settings().log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except ValidationError as exc:
        print(f"Invalid parameters: {exc}", file=sys.stderr)
    except (SonataError, binascii.Error) as exc:
        print(f"Error: {exc}", file=sys.stderr)
    except IndexError as exc:
        print(f"Invalid bit index: {exc}", file=sys.stderr)
    except ValueError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    sys.exit(main())
