import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .errors import PrepareError


class LabelRegistry:
    """
    Stable label -> integer id mapping.

    Ids start at 1 (0 is reserved for the background class by the object
    detection API) and are handed out in first-seen order. Once a label has an
    id it keeps it for the lifetime of the registry.
    """

    def __init__(self):
        self._next_id = 1
        self._ids: Dict[str, int] = {}

    @classmethod
    def from_annotations(cls, annotations: Iterable) -> 'LabelRegistry':
        registry = cls()
        for annotation in annotations:
            for obj in annotation.objects:
                registry.add(obj.name)
        return registry

    def add(self, label: str) -> int:
        """Register `label` if needed. Safe to call repeatedly, always returns the label's id."""
        label_id = self._ids.get(label)
        if label_id is None:
            label_id = self._next_id
            self._ids[label] = label_id
            self._next_id += 1
        return label_id

    def get(self, label: str) -> Optional[int]:
        return self._ids.get(label)

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(self._ids.items())

    def __contains__(self, label) -> bool:
        return label in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def to_pbtxt(self) -> str:
        """Render as a text-format StringIntLabelMap message."""
        blocks = []
        for name, label_id in self.items():
            blocks.append('item {\n'
                          f'  name: "{_escape(name)}"\n'
                          f'  id: {label_id}\n'
                          '}\n')
        return ''.join(blocks)

    def persist(self, path: str):
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(self.to_pbtxt())
        except OSError as e:
            raise PrepareError('labels', path, "Could not write label map") from e
        logging.info(f"Label map with {len(self)} label(s) written to {path}")


def _escape(text: str) -> str:
    return (text.replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace('\n', '\\n'))
