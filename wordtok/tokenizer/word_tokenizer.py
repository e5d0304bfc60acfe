import re
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from itertools import islice
from typing import Any, Self

from typing_extensions import override

from .base_tokenizer import Tokenizer


# Role -> surface string. Order matters: the roles take IDs 0, 1, 2, 3.
SPECIAL_TOKENS: dict[str, str] = {
    "PAD": "[PAD]",
    "UNK": "[UNK]",
    "BOS": "[BOS]",
    "EOS": "[EOS]",
}

PAD_ID = 0
UNK_ID = 1
BOS_ID = 2
EOS_ID = 3

SNAPSHOT_FIELDS = ("vocab", "reverseVocab", "specialTokens", "vocabSize", "isTrained")
STATS_SAMPLE_SIZE = 10

_PUNCTUATION = re.compile(r"([.!?;,:])")


class NotTrainedError(RuntimeError):
    pass


class MalformedSnapshotError(ValueError):
    pass


def tokenize(text: str) -> list[str]:
    """
    Split text into word-level tokens.

    The text is lowercased, every character of ``. ! ? ; , :`` becomes a token
    of its own and the rest is split on runs of whitespace.
    """
    return _PUNCTUATION.sub(r" \1 ", text.lower()).split()


def _is_token_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class TokenizerStats:
    vocab_size: int
    special_tokens: int
    is_trained: bool
    sample_tokens: list[tuple[str, int]]


class WordTokenizer(Tokenizer):

    def __init__(self) -> None:
        self._encoding_mapping: dict[str, int] = {}
        self._decoding_mapping: dict[int, str] = {}
        self._is_trained = False

    @classmethod
    def from_state(cls, state: Mapping[str, Any]) -> Self:
        return cls().import_state(state)

    @property
    @override
    def vocab_size(self) -> int:
        return len(self._encoding_mapping)

    @property
    @override
    def vocabulary(self) -> list[str]:
        return list(self._encoding_mapping)

    @property
    def is_trained(self) -> bool:
        return self._is_trained

    @property
    def special_tokens(self) -> dict[str, str]:
        return dict(SPECIAL_TOKENS)

    def __contains__(self, token: str) -> bool:
        return token in self._encoding_mapping

    def train(self, text: str, min_frequency: int = 1) -> Self:
        """
        Build the vocabulary from a corpus.

        Special tokens are always inserted first. Corpus tokens follow in the
        order they first appear in the text, keeping only the ones seen at
        least ``min_frequency`` times.

        Args:
            text (str): The training corpus.
            min_frequency (int): Minimum number of occurrences for a token
                to enter the vocabulary. Values below 1 behave like 1.

        Returns:
            The tokenizer itself, so calls can be chained.
        """
        encoding_mapping = {token: idx for idx, token in enumerate(SPECIAL_TOKENS.values())}

        # Counter keeps first-occurrence order, which fixes the ID assignment
        token_counts = Counter(tokenize(text))
        for token, count in token_counts.items():
            if count >= min_frequency and token not in encoding_mapping:
                encoding_mapping[token] = len(encoding_mapping)

        self._encoding_mapping = encoding_mapping
        self._decoding_mapping = {idx: token for token, idx in encoding_mapping.items()}
        self._is_trained = True
        return self

    @override
    def encode(self, text: str, add_special: bool = False) -> list[int]:
        """Convert a string into token IDs, mapping unknown tokens to the UNK ID."""
        self._ensure_trained("encoding")

        encoding = [self._encoding_mapping.get(token, UNK_ID) for token in tokenize(text)]
        if add_special:
            encoding = [BOS_ID, *encoding, EOS_ID]
        return encoding

    @override
    def decode(self, encoding: list[int], skip_special: bool = True) -> str:
        """Convert token IDs back into space separated tokens, unknown IDs become UNK."""
        self._ensure_trained("decoding")

        special = set(SPECIAL_TOKENS.values())
        tokens = (self._decoding_mapping.get(idx, SPECIAL_TOKENS["UNK"]) for idx in encoding)
        return " ".join(token for token in tokens if not (skip_special and token in special))

    def get_stats(self) -> TokenizerStats:
        return TokenizerStats(
            vocab_size=self.vocab_size,
            special_tokens=len(SPECIAL_TOKENS),
            is_trained=self._is_trained,
            sample_tokens=list(islice(self._encoding_mapping.items(), STATS_SAMPLE_SIZE)),
        )

    def export_state(self) -> dict[str, Any]:
        """
        Snapshot the tokenizer as a JSON compatible record.

        JSON object keys are strings, so the IDs of ``reverseVocab`` are
        stringified here and parsed back to integers by ``import_state``.
        """
        return {
            "vocab": dict(self._encoding_mapping),
            "reverseVocab": {str(idx): token for idx, token in self._decoding_mapping.items()},
            "specialTokens": dict(SPECIAL_TOKENS),
            "vocabSize": self.vocab_size,
            "isTrained": self._is_trained,
        }

    def import_state(self, state: Mapping[str, Any]) -> Self:
        """
        Replace the tokenizer state with a snapshot produced by ``export_state``.

        The whole snapshot is validated before anything is assigned, so a
        rejected snapshot leaves the tokenizer untouched.

        Raises:
            MalformedSnapshotError: If a field is missing or has the wrong type,
                if ``vocab`` and ``reverseVocab`` are not exact inverses, or if
                the special tokens are not bound to IDs 0-3.
        """
        if not isinstance(state, Mapping):
            raise MalformedSnapshotError(f"Tokenizer state must be a mapping, got {type(state).__name__}")

        missing = [field for field in SNAPSHOT_FIELDS if field not in state]
        if missing:
            raise MalformedSnapshotError(f"Tokenizer state is missing fields: {', '.join(missing)}")

        encoding_mapping = _parse_vocab(state["vocab"])
        decoding_mapping = _parse_reverse_vocab(state["reverseVocab"])

        if len(encoding_mapping) != len(decoding_mapping) or any(
            decoding_mapping.get(idx) != token for token, idx in encoding_mapping.items()
        ):
            raise MalformedSnapshotError("'vocab' and 'reverseVocab' are not inverses of each other")

        if sorted(decoding_mapping) != list(range(len(decoding_mapping))):
            raise MalformedSnapshotError("Token IDs must be dense and start at 0")

        vocab_size = state["vocabSize"]
        if not _is_token_id(vocab_size) or vocab_size != len(encoding_mapping):
            raise MalformedSnapshotError(
                f"'vocabSize' is {vocab_size!r} but the vocabulary holds {len(encoding_mapping)} tokens"
            )

        if state["specialTokens"] != SPECIAL_TOKENS:
            raise MalformedSnapshotError(f"'specialTokens' must be {SPECIAL_TOKENS}")

        is_trained = state["isTrained"]
        if not isinstance(is_trained, bool):
            raise MalformedSnapshotError(f"'isTrained' must be a boolean, got {is_trained!r}")

        if is_trained:
            for idx, token in enumerate(SPECIAL_TOKENS.values()):
                if encoding_mapping.get(token) != idx:
                    raise MalformedSnapshotError(f"Special token {token} must have ID {idx}")

        self._encoding_mapping = dict(sorted(encoding_mapping.items(), key=lambda item: item[1]))
        self._decoding_mapping = dict(sorted(decoding_mapping.items()))
        self._is_trained = is_trained
        return self

    def _ensure_trained(self, operation: str) -> None:
        if not self._is_trained:
            raise NotTrainedError(f"Tokenizer must be trained before {operation}")


def _parse_vocab(vocab: Any) -> dict[str, int]:
    if not isinstance(vocab, Mapping):
        raise MalformedSnapshotError(f"'vocab' must be a mapping, got {type(vocab).__name__}")

    encoding_mapping: dict[str, int] = {}
    for token, idx in vocab.items():
        if not isinstance(token, str) or not _is_token_id(idx):
            raise MalformedSnapshotError(f"Invalid 'vocab' entry {token!r}: {idx!r}")
        encoding_mapping[token] = idx
    return encoding_mapping


def _parse_reverse_vocab(reverse_vocab: Any) -> dict[int, str]:
    if not isinstance(reverse_vocab, Mapping):
        raise MalformedSnapshotError(f"'reverseVocab' must be a mapping, got {type(reverse_vocab).__name__}")

    decoding_mapping: dict[int, str] = {}
    for key, token in reverse_vocab.items():
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise MalformedSnapshotError(f"Invalid 'reverseVocab' key {key!r}")
        try:
            idx = int(key)
        except ValueError as e:
            raise MalformedSnapshotError(f"Invalid 'reverseVocab' key {key!r}") from e

        if idx < 0 or idx in decoding_mapping or not isinstance(token, str):
            raise MalformedSnapshotError(f"Invalid 'reverseVocab' entry {key!r}: {token!r}")
        decoding_mapping[idx] = token
    return decoding_mapping
