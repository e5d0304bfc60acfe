from abc import ABC, abstractmethod
import os
import sys
from typing_extensions import override

from tqdm import tqdm


class TextProvider(ABC):
    @abstractmethod
    def get_text(self) -> str:
        """This method fetches the text from the underlying storage"""


class StaticTextProvider(TextProvider):

    def __init__(self, text: str) -> None:
        self._data = text

    @override
    def get_text(self) -> str:
        return self._data


class FileTextProvider(TextProvider):

    def __init__(self, file_path: str) -> None:
        if not os.path.exists(file_path):
            raise ValueError(f"File path {file_path} does not exist")

        with open(file_path, "r", encoding="utf-8") as f:
            self._data = f.read()

    @override
    def get_text(self) -> str:
        return self._data


class FolderTextProvider(TextProvider):

    def __init__(self, dir_path: str) -> None:
        if not os.path.exists(dir_path):
            raise ValueError(f"Directory path {dir_path} does not exist")

        if not os.path.isdir(dir_path):
            raise ValueError(f"Directory path {dir_path} is not a directory")

        # Sorted so the same folder always yields the same corpus and vocabulary
        file_paths = sorted(
            os.path.join(root, file_name)
            for root, _, files in os.walk(dir_path)
            for file_name in files
            if not file_name.startswith(".")
        )

        chunks = []
        for file_path in tqdm(file_paths, desc="Loading corpus", file=sys.stdout):
            with open(file_path, "r", encoding="utf-8") as f:
                chunks.append(f.read())
        self._data = "\n".join(chunks)

    @override
    def get_text(self) -> str:
        return self._data


def get_text_provider(path: str | None, fallback_text: str = "") -> TextProvider:
    if path is None:
        return StaticTextProvider(fallback_text)
    if os.path.isdir(path):
        return FolderTextProvider(path)
    return FileTextProvider(path)
