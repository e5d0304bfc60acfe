import argparse
import sys

from .dataloader import get_text_provider
from .tokenizer.word_tokenizer import MalformedSnapshotError, NotTrainedError, WordTokenizer
from .tokenizer_io import DEFAULT_TOKENIZER_PATH, TokenizerLoadFailed, load_tokenizer, save_tokenizer


DEFAULT_MIN_FREQUENCY = 1
SAMPLE_TEXT = (
    "Hello world! This is a sample text for training our custom tokenizer. "
    "It handles punctuation, special tokens, and vocabulary learning."
)

# Failures a command reports instead of crashing with a traceback
COMMAND_ERRORS = (NotTrainedError, MalformedSnapshotError, TokenizerLoadFailed, ValueError, OSError)


def parse_token_ids(ids: str) -> list[int]:
    if not ids.strip():
        return []

    token_ids = []
    for part in ids.split(","):
        try:
            token_ids.append(int(part))
        except ValueError as e:
            raise ValueError(f"Invalid token ID: {part.strip()!r}") from e
    return token_ids


def train(args: argparse.Namespace) -> None:
    print("Training tokenizer...")
    text = get_text_provider(args.input, fallback_text=SAMPLE_TEXT).get_text()

    tokenizer = WordTokenizer().train(text, args.min_freq)
    print("Training complete!")
    print(f"Vocabulary size: {tokenizer.vocab_size}")

    save_tokenizer(args.output, tokenizer)


def encode(args: argparse.Namespace) -> None:
    tokenizer = load_tokenizer(args.tokenizer)
    token_ids = tokenizer.encode(args.text, add_special=args.special)

    print(f"Input: {args.text}")
    print(f"Token IDs: {', '.join(str(idx) for idx in token_ids)}")
    print(f"Token count: {len(token_ids)}")


def decode(args: argparse.Namespace) -> None:
    tokenizer = load_tokenizer(args.tokenizer)
    token_ids = parse_token_ids(args.ids)
    text = tokenizer.decode(token_ids, skip_special=not args.keep_special)

    print(f"Token IDs: {', '.join(str(idx) for idx in token_ids)}")
    print(f"Decoded text: {text}")


def stats(args: argparse.Namespace) -> None:
    tokenizer = load_tokenizer(args.tokenizer)
    tokenizer_stats = tokenizer.get_stats()

    print("Tokenizer Statistics:")
    print(f"  Vocabulary size: {tokenizer_stats.vocab_size}")
    print(f"  Special tokens: {tokenizer_stats.special_tokens}")
    print(f"  Is trained: {tokenizer_stats.is_trained}")
    print("  Sample tokens:")
    for token, idx in tokenizer_stats.sample_tokens:
        print(f'    {idx}: "{token}"')


def add_tokenizer_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-t",
                        "--tokenizer",
                        help="The tokenizer file to load",
                        default=DEFAULT_TOKENIZER_PATH,
                        type=str)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wordtok", description="Word-level tokenizer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train_parser = subparsers.add_parser("train", help="Train the tokenizer on a text file or folder")
    train_parser.add_argument("-i",
                              "--input",
                              help="The file or folder you want to train on, a sample text is used if omitted",
                              type=str)
    train_parser.add_argument("-o",
                              "--output",
                              help="Where to save the trained tokenizer",
                              default=DEFAULT_TOKENIZER_PATH,
                              type=str)
    train_parser.add_argument("-m",
                              "--min-freq",
                              help="Minimum number of occurrences for a token to enter the vocabulary",
                              default=DEFAULT_MIN_FREQUENCY,
                              type=int)
    train_parser.set_defaults(func=train)

    encode_parser = subparsers.add_parser("encode", help="Encode text to token IDs")
    add_tokenizer_argument(encode_parser)
    encode_parser.add_argument("-s",
                               "--special",
                               help="Wrap the encoding in BOS and EOS tokens",
                               action="store_true")
    encode_parser.add_argument("text", help="The text to encode", type=str)
    encode_parser.set_defaults(func=encode)

    decode_parser = subparsers.add_parser("decode", help="Decode token IDs to text")
    add_tokenizer_argument(decode_parser)
    decode_parser.add_argument("-k",
                               "--keep-special",
                               help="Keep special tokens in the decoded text",
                               action="store_true")
    decode_parser.add_argument("ids", help="Comma separated token IDs", type=str)
    decode_parser.set_defaults(func=decode)

    stats_parser = subparsers.add_parser("stats", help="Show tokenizer statistics")
    add_tokenizer_argument(stats_parser)
    stats_parser.set_defaults(func=stats)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        args.func(args)
    except COMMAND_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
