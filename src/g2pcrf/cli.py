"""CLI entrypoint for g2pcrf: subcommand dispatcher."""

import argparse
import json
import logging
import os
import sys

from g2pcrf.alphabet import ALPHABETS, convert_alphabet
from g2pcrf.errors import G2PError
from g2pcrf.pipeline import FALLBACKS, CRFPhonemiser
from g2pcrf.types import Annotation, ParsedSyllable, Word

MODEL_ENV = "G2PCRF_MODEL"


def _add_phonemise_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments specific to the phonemise subcommand."""
    parser.add_argument("words", nargs="+", help="Words to phonemise.")
    parser.add_argument("--model", default=os.environ.get(MODEL_ENV),
                        help=f"Model JSON file, optionally gzipped (default: ${MODEL_ENV})")
    parser.add_argument("--alphabet", default="ipa", choices=list(ALPHABETS),
                        help="Output phoneme alphabet (default: ipa)")
    parser.add_argument("--pos", default=None,
                        help="Part-of-speech tag applied to every word")
    parser.add_argument("--fallback", default=None, choices=list(FALLBACKS),
                        help="Phonemiser to use when the CRF finds no path (default: none)")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the full annotation as JSON")


def _add_convert_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments specific to the convert subcommand."""
    parser.add_argument("symbols", nargs="+", help="Phoneme symbols to convert.")
    parser.add_argument("--source", default="arpabet", choices=list(ALPHABETS),
                        help="Alphabet of the input symbols (default: arpabet)")
    parser.add_argument("--target", default="ipa", choices=list(ALPHABETS),
                        help="Alphabet to convert to (default: ipa)")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="g2pcrf",
        description="Grapheme-to-phoneme conversion with conditional random fields",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    phonemise_parser = subparsers.add_parser(
        "phonemise",
        help="Transcribe words into syllabified phonemes",
        description="Transcribe words into stress-annotated, syllabified phonemes",
    )
    _add_phonemise_args(phonemise_parser)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert phoneme symbols between alphabets",
        description="Convert phoneme symbols between ARPABET, IPA and X-SAMPA",
    )
    _add_convert_args(convert_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def _word_transcription(annotation: Annotation, word_index: int) -> str:
    syllables = []
    for si in annotation.syllable_indices_of_word(word_index):
        labels = tuple(
            annotation.phonemes[p].label
            for p in annotation.phoneme_indices_of_syllable(si)
        )
        syllables.append(str(ParsedSyllable(labels, annotation.syllables[si].stress)))
    return " - ".join(syllables)


def _run_phonemise(args: argparse.Namespace) -> None:
    """Run the phonemiser over the given words."""
    if not args.model:
        print(f"Error: no model given; pass --model or set {MODEL_ENV}", file=sys.stderr)
        sys.exit(1)

    phonemiser = CRFPhonemiser(alphabet=args.alphabet, fallback=args.fallback)
    phonemiser.startup(args.model)

    words = [Word(text=text, pos=args.pos) for text in args.words]
    annotation = phonemiser.process(words)

    if args.json:
        print(json.dumps(annotation.to_dict(), indent=2, ensure_ascii=False))
        return
    for i, word in enumerate(words):
        print(f"{word.text}\t{_word_transcription(annotation, i)}")


def _run_convert(args: argparse.Namespace) -> None:
    """Convert each symbol and print one result per line."""
    for symbol in args.symbols:
        print(convert_alphabet(symbol, args.source, args.target))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if not args.verbose:
        # g2p_en pulls in nltk, which is chatty on first use
        logging.getLogger("nltk").setLevel(logging.ERROR)

    try:
        if args.command == "phonemise":
            _run_phonemise(args)
        elif args.command == "convert":
            _run_convert(args)
    except G2PError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
