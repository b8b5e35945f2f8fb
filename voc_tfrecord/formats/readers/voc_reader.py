import os
import xml.etree.ElementTree as ET
from typing import List, Optional

from .base_reader import BaseReader
from ..internal_data import Annotation, BndBox, Size, Source, VocObject
from ... import config
from ...errors import AnnotationParseError


def find_annotation_files(root: str) -> List[str]:
    """Recursively collect PASCAL-VOC files under `root`, in a reproducible order."""
    xml_paths = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            if os.path.splitext(filename)[1].lower() == config.ANNOTATION_EXTENSION:
                xml_paths.append(os.path.join(dirpath, filename))
    return xml_paths


class VocReader(BaseReader):
    """Reads a single PASCAL VOC annotation file."""

    def read(self) -> Annotation:
        try:
            tree = ET.parse(self.path)
        except (OSError, ET.ParseError) as e:
            raise AnnotationParseError(self.path, f"Failed to read the annotation: {e}") from e

        root = tree.getroot()
        if root.tag != 'annotation':
            raise AnnotationParseError(self.path, f"Unexpected root element <{root.tag}>")

        try:
            return self._parse(root)
        except ValueError as e:
            raise AnnotationParseError(self.path, f"Failed to deserialize the annotation: {e}") from e

    def _parse(self, root) -> Annotation:
        filename = _required_text(root, 'filename')
        # The annotation and its image are expected to sit side by side
        system_path = os.path.join(os.path.dirname(self.path), filename)

        size = _required(root, 'size')
        width = int(_required_text(size, 'width'))
        height = int(_required_text(size, 'height'))
        if width <= 0 or height <= 0:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        depth_text = _optional_text(size, 'depth')

        source = root.find('source')
        if source is not None:
            source = Source(database=_optional_text(source, 'database'),
                            annotation=_optional_text(source, 'annotation'),
                            image=_optional_text(source, 'image'))
        else:
            source = Source()

        objects = tuple(self._parse_object(obj) for obj in root.findall('object'))

        return Annotation(
            folder=_optional_text(root, 'folder') or '',
            filename=filename,
            path=_optional_text(root, 'path') or '',
            system_path=system_path,
            size=Size(width=width, height=height, depth=int(depth_text) if depth_text else 3),
            source=source,
            segmented=_bool(_optional_text(root, 'segmented')),
            objects=objects,
        )

    @staticmethod
    def _parse_object(obj) -> VocObject:
        bndbox = _required(obj, 'bndbox')
        return VocObject(
            name=_required_text(obj, 'name'),
            pose=_optional_text(obj, 'pose') or 'Unspecified',
            truncated=_bool(_optional_text(obj, 'truncated')),
            difficult=_bool(_optional_text(obj, 'difficult')),
            bndbox=BndBox(
                xmin=_number(_required_text(bndbox, 'xmin')),
                ymin=_number(_required_text(bndbox, 'ymin')),
                xmax=_number(_required_text(bndbox, 'xmax')),
                ymax=_number(_required_text(bndbox, 'ymax')),
            ),
        )


def _required(element, tag):
    child = element.find(tag)
    if child is None:
        raise ValueError(f"missing <{tag}> in <{element.tag}>")
    return child


def _required_text(element, tag) -> str:
    text = _optional_text(element, tag)
    if text is None:
        raise ValueError(f"missing or empty <{tag}> in <{element.tag}>")
    return text


def _optional_text(element, tag) -> Optional[str]:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _number(text: str):
    try:
        return int(text)
    except ValueError:
        return float(text)


def _bool(text: Optional[str]) -> bool:
    if text is None:
        return False
    value = text.lower()
    if value in ('1', 'true'):
        return True
    if value in ('0', 'false'):
        return False
    raise ValueError(f"'{text}' is not a boolean")
