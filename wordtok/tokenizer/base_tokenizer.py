from abc import abstractmethod, ABC


class Tokenizer(ABC):
    """Common surface of every tokenizer: text <-> token IDs plus its vocabulary."""

    @abstractmethod
    def encode(self, text: str) -> list[int]:
        """Convert a string into a sequence of token IDs."""

    @abstractmethod
    def decode(self, encoding: list[int]) -> str:
        """Convert a sequence of token IDs back into a string."""

    @property
    @abstractmethod
    def vocab_size(self) -> int:
        """Return the size of the vocabulary."""

    @property
    @abstractmethod
    def vocabulary(self) -> list[str]:
        """Return the learned vocabulary, ordered by token ID"""

    def __len__(self) -> int:
        return self.vocab_size
