from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional

from bs4 import BeautifulSoup  # type: ignore

from collabkit.contract.paths import FieldSnapshot

FIELD_KEY_ATTRIBUTE = "data-key"


def collect_fields(html: str) -> FieldSnapshot:
    """Collect ``data-key`` tagged elements from editable preview markup.

    Text content is trimmed; when a key repeats, the last element scanned wins.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    result: FieldSnapshot = {}
    for element in soup.find_all(attrs={FIELD_KEY_ATTRIBUTE: True}):
        key = element.get(FIELD_KEY_ATTRIBUTE)
        if not key:
            continue
        result[str(key)] = element.get_text().strip()
    return result


class FieldRegistry:
    """Ordered mapping of logical field keys to their current values."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = {}
        if values:
            self.update(values)

    @classmethod
    def from_html(cls, html: str) -> "FieldRegistry":
        return cls(collect_fields(html))

    def set(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("Field key must not be empty.")
        self._values[key] = "" if value is None else str(value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def update(self, values: Mapping[str, str]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def keys(self) -> List[str]:
        return list(self._values)

    def snapshot(self) -> FieldSnapshot:
        return {key: value.strip() for key, value in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)
