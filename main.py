#!/usr/bin/env python3
"""
soundcraft - command line entry point.

Usage:
    soundcraft analyze voice.wav
    soundcraft analyze clips/*.wav --json
    soundcraft analyze voice.wav --alphabet coarse
    soundcraft effects voice.wav -o out.wav --noise 60 --semitones 3 --gain 1.5
    soundcraft spectrum voice.wav --top 10
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from soundcraft.common.logging import get_logger, request_context, setup_logging
from soundcraft.common.primitives import analyze_spectrum
from soundcraft.core.adapters import AudioLoader, write_wav
from soundcraft.core.config import DEFAULT_CONFIG_PATH, Config, get_settings
from soundcraft.core.errors import SoundCraftError
from soundcraft.modules.analysis.config import AnalysisConfig, PhonemeAlphabet
from soundcraft.modules.analysis.pipelines import FeatureReport, VoiceAnalysisPipeline
from soundcraft.modules.effects import EffectParameters, EffectsChain

logger = get_logger(__name__)


def load_analysis_config(config_path: Optional[str], alphabet: Optional[str]) -> AnalysisConfig:
    """AnalysisConfig from YAML (default file when config_path is None)."""
    settings = get_settings()
    path = config_path or settings.config_path
    chosen = PhonemeAlphabet(alphabet) if alphabet else None
    if path is None and not DEFAULT_CONFIG_PATH.exists():
        return AnalysisConfig.for_alphabet(chosen or PhonemeAlphabet.VOWEL)
    return AnalysisConfig.from_config(Config(path), alphabet=chosen)


def print_report(path: Path, report: FeatureReport) -> None:
    """Human-readable report."""
    print("=" * 50)
    print(path.name)
    print("=" * 50)
    print(f"Duration:   {report.duration_sec:.2f}s @ {report.sample_rate} Hz")
    print(f"Pitch:      {report.pitch_hz:.1f} Hz")
    print(f"Amplitude:  {report.amplitude:.3f}")
    print(f"Clarity:    {report.clarity:.3f}")
    print(f"Phonemes:   {', '.join(report.phonemes)}")
    print(f"Sentiment:  {report.sentiment.label} ({report.sentiment.confidence:.0%})")
    print(f"Summary:    {report.summary}")
    print()


def cmd_analyze(args) -> int:
    config = load_analysis_config(args.config, args.alphabet)
    loader = AudioLoader()
    pipeline = VoiceAnalysisPipeline(config)

    paths = [Path(p) for p in args.files]
    results = {}
    failures = 0

    iterator = tqdm(paths, desc="Analyzing", unit="file", disable=len(paths) < 2 or args.json)
    for path in iterator:
        with request_context():
            try:
                buffer = loader.load(path)
                report = pipeline.analyze(buffer, source=path.name)
            except SoundCraftError as e:
                failures += 1
                results[str(path)] = e.to_dict()
                if not args.json:
                    print(f"Error: {path.name}: {e.message}", file=sys.stderr)
                continue

        results[str(path)] = report.to_dict()
        if not args.json:
            print_report(path, report)

    if args.json:
        payload = results[str(paths[0])] if len(paths) == 1 else results
        print(json.dumps(payload, indent=2))

    logger.info("Analyze finished", data={"files": len(paths), "failures": failures})
    return 1 if failures else 0


def cmd_effects(args) -> int:
    config = load_analysis_config(args.config, None)
    params = EffectParameters(
        noise_reduction_amount=args.noise,
        pitch_shift_semitones=args.semitones,
        gain=args.gain,
    )

    with request_context():
        try:
            buffer = AudioLoader().load(args.file)
            result = EffectsChain(config).apply(buffer, params)
            out = write_wav(result.buffer, args.output)
        except SoundCraftError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    if result.pitch_shift_failed:
        print(f"Warning: pitch shift skipped ({result.error})", file=sys.stderr)
    print(f"Wrote {out} ({result.buffer.duration_sec:.2f}s @ {result.buffer.sample_rate} Hz)")
    return 0


def cmd_spectrum(args) -> int:
    with request_context():
        try:
            buffer = AudioLoader().load(args.file)
        except SoundCraftError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    spectrum = analyze_spectrum(buffer.samples, buffer.sample_rate)
    if spectrum.is_empty:
        print("Clip too short for a spectrum")
        return 0

    print(f"FFT size {spectrum.fft_size}, bin width {spectrum.bin_width_hz:.2f} Hz")
    for freq, mag in spectrum.top_bins(args.top):
        print(f"  {freq:10.1f} Hz  {mag:.5f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soundcraft",
        description="Voice analysis and effects",
    )
    parser.add_argument("--config", help="YAML analysis config (default: config/default_config.yaml)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Print the feature report of one or more clips")
    p_analyze.add_argument("files", nargs="+", help="Audio files")
    p_analyze.add_argument("--json", action="store_true", help="Output JSON")
    p_analyze.add_argument("--alphabet", choices=[a.value for a in PhonemeAlphabet],
                           help="Phoneme alphabet preset")
    p_analyze.set_defaults(func=cmd_analyze)

    p_effects = sub.add_parser("effects", help="Apply effects and write a WAV file")
    p_effects.add_argument("file", help="Input audio file")
    p_effects.add_argument("-o", "--output", required=True, help="Output WAV path")
    p_effects.add_argument("--noise", type=float, default=50.0, help="Noise reduction 0-100")
    p_effects.add_argument("--semitones", type=float, default=0.0, help="Pitch shift -12..12")
    p_effects.add_argument("--gain", type=float, default=1.0, help="Volume gain 0-3")
    p_effects.set_defaults(func=cmd_effects)

    p_spectrum = sub.add_parser("spectrum", help="Print the strongest spectral bins")
    p_spectrum.add_argument("file", help="Input audio file")
    p_spectrum.add_argument("--top", type=int, default=10, help="Number of bins")
    p_spectrum.set_defaults(func=cmd_spectrum)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        # Also rejects malformed environment values before any work
        settings = get_settings()
        setup_logging(
            level=args.log_level or None,
            log_file=settings.log_file,
            json_format=settings.log_json or None,
            component="cli",
            force=True,
        )
        return args.func(args)
    except SoundCraftError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
