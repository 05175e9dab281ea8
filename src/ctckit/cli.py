"""CLI entrypoint for ctckit."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ctckit.config import AppConfig, load_config
from ctckit.core import run_decoding, run_scoring
from ctckit.decode import DECODER_NAMES
from ctckit.io import load_emissions, to_json, write_json
from ctckit.models import DecodeRequest, DecodeResponse, ScoreRequest, ScoreResponse


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="ctckit",
        description="CTC likelihoods, gradients and decoding.",
    )
    subparsers = parser.add_subparsers(dest="command")

    score = subparsers.add_parser("score", help="Score a label against emission frames")
    score.add_argument("emissions", help="Path to emission JSON file")
    score.add_argument(
        "--label",
        type=int,
        nargs="*",
        default=None,
        help="Label symbol indices (default: the file's label)",
    )
    score.add_argument(
        "--gradient",
        action="store_true",
        help="Include per-frame gradients of the log-likelihood",
    )
    score.add_argument(
        "--upstream",
        type=float,
        default=1.0,
        help="Scale applied to the gradient (default: 1.0)",
    )
    _add_common_arguments(score)

    decode = subparsers.add_parser("decode", help="Decode the most likely label")
    decode.add_argument("emissions", help="Path to emission JSON file")
    decode.add_argument(
        "--decoder",
        default="best_path",
        choices=list(DECODER_NAMES),
        help="Decoding algorithm (default: best_path)",
    )
    decode.add_argument(
        "--blank-threshold",
        type=float,
        default=None,
        help="Prefix search: blank log-probability above which a frame splits the search",
    )
    decode.add_argument(
        "--beam-width",
        type=int,
        default=None,
        help="Prefix search: keep at most this many prefixes per frame (default: exact)",
    )
    _add_common_arguments(decode)

    serve = subparsers.add_parser("serve", help="Run the ctckit HTTP API")
    serve.add_argument("--host", default=None, help="Override API host")
    serve.add_argument("--port", type=int, default=None, help="Override API port")

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--probabilities",
        action="store_true",
        help="Frames hold probabilities rather than log-probabilities",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output JSON path. If omitted, prints to stdout.",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )

    if args.command in {"score", "decode"}:
        try:
            response = _run_command(args, config)
        except (OSError, ValueError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        if args.output:
            write_json(response, args.output)
            print(f"Wrote {args.command} JSON to {args.output}")
            return 0
        print(to_json(response))
        return 0

    if args.command == "serve":
        try:
            import uvicorn
        except ModuleNotFoundError:
            print(
                "`ctckit serve` requires uvicorn. Install project dependencies first.",
                file=sys.stderr,
            )
            return 1

        host = args.host or config.api_host
        port = args.port or config.api_port
        uvicorn.run(
            "ctckit.api:app",
            host=host,
            port=port,
            workers=config.workers,
            log_level=config.log_level.lower(),
            reload=False,
        )
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


def _run_command(
    args: argparse.Namespace, config: AppConfig
) -> ScoreResponse | DecodeResponse:
    emission_file = load_emissions(args.emissions, probabilities=args.probabilities)
    if args.command == "score":
        label = args.label if args.label is not None else emission_file.label
        if label is None:
            raise ValueError("a label is required: pass --label or include 'label' in the file")
        return run_scoring(
            ScoreRequest(
                frames=emission_file.frames,
                label=label,
                include_gradient=args.gradient,
                upstream=args.upstream,
            )
        )
    return run_decoding(
        DecodeRequest(
            frames=emission_file.frames,
            decoder=args.decoder,
            blank_threshold=args.blank_threshold,
            beam_width=args.beam_width,
        ),
        config,
    )


if __name__ == "__main__":
    raise SystemExit(main())
