from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class BndBox:
    xmin: float
    ymin: float
    xmax: float
    ymax: float


@dataclass(frozen=True)
class VocObject:
    name: str
    bndbox: BndBox
    pose: str = 'Unspecified'
    truncated: bool = False
    difficult: bool = False


@dataclass(frozen=True)
class Source:
    database: Optional[str] = None
    annotation: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class Size:
    width: int
    height: int
    depth: int = 3


@dataclass(frozen=True)
class Annotation:
    folder: str
    filename: str
    # Path as written by the labelling tool, usually only valid on the labeller's machine
    path: str
    # Image file next to the annotation, named after `filename`
    system_path: str
    size: Size
    source: Source = field(default_factory=Source)
    segmented: bool = False
    objects: Tuple[VocObject, ...] = ()
