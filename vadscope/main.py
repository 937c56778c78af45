#!/usr/bin/env python3
"""
Command line entry point for vadscope.

Usage:
    vadscope speech.wav
    vadscope speech.wav --preset conservative --pad-ms 60 --output segments.json
    vadscope speech.wav --config detector.yaml --log-level DEBUG
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from vadscope.__version__ import __version__

logger = logging.getLogger("vadscope")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vadscope",
        description="Detect speech segments in an audio file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vadscope interview.wav
  vadscope interview.wav --threshold 0.6 --min-silence-ms 300
  vadscope interview.wav --config detector.yaml --output segments.json
        """,
    )

    parser.add_argument("audio", type=Path, help="Audio file to analyze.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    options_group = parser.add_argument_group("Detector Options")
    options_group.add_argument("--config", type=Path, default=None,
                               help="YAML file with detector options.")
    options_group.add_argument("--preset", default=None,
                               help="Options preset (default, conservative, balanced, aggressive).")
    options_group.add_argument("--sample-rate", type=int, choices=[8000, 16000], default=None,
                               help="Analysis sampling rate; audio is resampled to it.")
    options_group.add_argument("--threshold", type=float, default=None,
                               help="Speech probability threshold (0-1).")
    options_group.add_argument("--min-speech-ms", type=int, default=None,
                               help="Minimum speech duration in milliseconds.")
    options_group.add_argument("--min-silence-ms", type=int, default=None,
                               help="Minimum silence duration in milliseconds.")
    options_group.add_argument("--max-speech-s", type=float, default=None,
                               help="Maximum speech duration in seconds before splitting.")
    options_group.add_argument("--pad-ms", type=int, default=None,
                               help="Padding around each segment in milliseconds.")

    model_group = parser.add_argument_group("Model Options")
    model_group.add_argument("--model", type=Path, default=None,
                             help="Path to a Silero VAD ONNX model (default: bundled model).")
    model_group.add_argument("--gpu", action="store_true",
                             help="Use the CUDA execution provider when available.")

    output_group = parser.add_argument_group("Output and Logging Options")
    output_group.add_argument("--output", "-o", type=Path, default=None,
                              help="Write the result as JSON to this path.")
    output_group.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                              default="WARNING", help="Logging level.")
    output_group.add_argument("--log-file", default=None, help="Log file path.")

    return parser


def _collect_overrides(args: argparse.Namespace) -> dict:
    return {
        "sample_rate": args.sample_rate,
        "threshold": args.threshold,
        "min_speech_duration_ms": args.min_speech_ms,
        "min_silence_duration_ms": args.min_silence_ms,
        "max_speech_duration_s": args.max_speech_s,
        "speech_pad_ms": args.pad_ms,
    }


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    from vadscope.utils.logger import setup_logger
    setup_logger("vadscope", args.log_level, args.log_file)

    # Import here to keep CLI startup fast
    from vadscope.config import ConfigurationError, build_options, load_options
    from vadscope.modules.speech_segmentation import (
        DetectorConfig,
        FrameProberFactory,
        ProbeError,
        SpeechDetector,
    )

    overrides = _collect_overrides(args)
    try:
        if args.config is not None:
            options = load_options(args.config, preset=args.preset, **overrides)
        else:
            options = build_options(args.preset, **overrides)
        config = DetectorConfig.from_options(options)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        prober = FrameProberFactory.create("silero", model_path=args.model, use_gpu=args.gpu)
    except (ImportError, ValueError) as e:
        print(f"Cannot create frame prober: {e}", file=sys.stderr)
        return 1

    detector = SpeechDetector(prober, config=config)

    try:
        result = detector.analyze_file(args.audio)
    except (FileNotFoundError, RuntimeError) as e:
        # soundfile raises LibsndfileError (a RuntimeError) for unreadable files
        label = "Analysis failed" if isinstance(e, ProbeError) else "Error loading audio"
        print(f"{label}: {e}", file=sys.stderr)
        return 1

    for segment in result.segments:
        print(f"{segment.start_sec:10.3f} - {segment.end_sec:10.3f}")
    print(
        f"{result.num_segments} segment(s), "
        f"{result.speech_coverage_sec:.3f}s of {result.audio_duration_sec:.3f}s "
        f"({result.speech_coverage_ratio:.1%})"
    )

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"JSON result written to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
