import json
import os

from .tokenizer.word_tokenizer import WordTokenizer


DEFAULT_TOKENIZER_PATH = "tokenizer.json"


class TokenizerLoadFailed(Exception):
    pass


def load_tokenizer(tokenizer_path: str) -> WordTokenizer:
    """
    Rebuild a tokenizer from its JSON snapshot.

    Raises:
        TokenizerLoadFailed: If the file is missing or is not valid JSON.
        MalformedSnapshotError: If the JSON does not describe a valid tokenizer.
    """
    if not os.path.exists(tokenizer_path):
        raise TokenizerLoadFailed(f"Tokenizer file {tokenizer_path} does not exist")

    try:
        with open(tokenizer_path, "r", encoding="utf-8") as f:
            state = json.load(f)
    except (OSError, ValueError) as e:
        raise TokenizerLoadFailed(f"Could not read tokenizer file {tokenizer_path}: {e}") from e

    return WordTokenizer.from_state(state)


def save_tokenizer(tokenizer_path: str, tokenizer: WordTokenizer) -> None:
    directory = os.path.dirname(tokenizer_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(tokenizer_path, "w", encoding="utf-8") as f:
        json.dump(tokenizer.export_state(), f, indent=2, ensure_ascii=False)
    print(f"Saved the tokenizer to path: {tokenizer_path}")
