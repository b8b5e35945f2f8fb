"""
Flattening of a PASCAL-VOC annotation into the object detection feature schema.

Structure of the emitted record: example <- features <- feature, one feature
per attribute name below.

    image/height, image/width       int64, image size in pixels
    image/filename, image/source_id bytes, both hold the image filename
    image/encoded                   bytes, raw image file content
    image/format                    bytes, b'jpeg' or b'png'
    image/object/bbox/xmin .. ymax  float, normalized coordinates, 1 per box
    image/object/class/label        int64, label map id, 1 per box
    image/object/class/text         bytes, label name, 1 per box
"""
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from .. import config
from ..errors import ImageReadError, UnknownLabelError, UnsupportedFormatError
from ..label_map import LabelRegistry
from ..partition import normalize
from .internal_data import Annotation


# Feature is a tagged union of exactly these three list kinds.
@dataclass(frozen=True)
class Int64List:
    value: Tuple[int, ...]


@dataclass(frozen=True)
class FloatList:
    value: Tuple[float, ...]


@dataclass(frozen=True)
class BytesList:
    value: Tuple[bytes, ...]


Feature = Union[Int64List, FloatList, BytesList]


@dataclass(frozen=True)
class FeatureRecord:
    height: int
    width: int
    filename: str
    source_id: str
    encoded: bytes
    image_format: str
    xmins: Tuple[float, ...]
    xmaxs: Tuple[float, ...]
    ymins: Tuple[float, ...]
    ymaxs: Tuple[float, ...]
    class_labels: Tuple[int, ...]
    class_texts: Tuple[str, ...]

    def to_features(self) -> Dict[str, Feature]:
        return {
            'image/height': Int64List((self.height,)),
            'image/width': Int64List((self.width,)),
            'image/filename': BytesList((self.filename.encode('utf-8'),)),
            'image/source_id': BytesList((self.source_id.encode('utf-8'),)),
            'image/encoded': BytesList((self.encoded,)),
            'image/format': BytesList((self.image_format.encode('utf-8'),)),
            'image/object/bbox/xmin': FloatList(self.xmins),
            'image/object/bbox/xmax': FloatList(self.xmaxs),
            'image/object/bbox/ymin': FloatList(self.ymins),
            'image/object/bbox/ymax': FloatList(self.ymaxs),
            'image/object/class/label': Int64List(self.class_labels),
            'image/object/class/text': BytesList(tuple(t.encode('utf-8') for t in self.class_texts)),
        }


def image_format(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    try:
        return config.IMAGE_FORMATS[ext]
    except KeyError:
        raise UnsupportedFormatError(f"Unsupported image extension '{ext}' for {filename}") from None


def read_image(annotation: Annotation) -> bytes:
    try:
        with open(annotation.system_path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ImageReadError(f"Could not read image {annotation.system_path}: {e}") from e


class FeatureEncoder:
    """
    Builds FeatureRecords against a label map.

    The label map must already hold every label of the whole dataset: build it
    in a first pass over all annotations, then encode.
    """

    def __init__(self, label_map: LabelRegistry):
        self.label_map = label_map

    def encode(self, annotation: Annotation, encoded: Optional[bytes] = None) -> FeatureRecord:
        """`encoded` is the image content when the caller already read it."""
        fmt = image_format(annotation.filename)
        if encoded is None:
            encoded = read_image(annotation)

        class_labels = []
        for obj in annotation.objects:
            label_id = self.label_map.get(obj.name)
            if label_id is None:
                raise UnknownLabelError(obj.name)
            class_labels.append(label_id)

        width = annotation.size.width
        height = annotation.size.height
        boxes = [obj.bndbox for obj in annotation.objects]

        return FeatureRecord(
            height=height,
            width=width,
            filename=annotation.filename,
            source_id=annotation.filename,
            encoded=encoded,
            image_format=fmt,
            xmins=tuple(normalize(b.xmin, 0, width) for b in boxes),
            xmaxs=tuple(normalize(b.xmax, 0, width) for b in boxes),
            ymins=tuple(normalize(b.ymin, 0, height) for b in boxes),
            ymaxs=tuple(normalize(b.ymax, 0, height) for b in boxes),
            class_labels=tuple(class_labels),
            class_texts=tuple(obj.name for obj in annotation.objects),
        )
