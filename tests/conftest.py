import os
from xml.etree.ElementTree import Element, SubElement, ElementTree

import pytest


def write_annotation(directory, xml_name, filename, width=480, height=360, objects=(),
                     source=None, segmented='0'):
    """Write a PASCAL-VOC file. `objects` is a sequence of (name, (xmin, ymin, xmax, ymax))."""
    annotation = Element('annotation')
    SubElement(annotation, 'folder').text = 'images'
    SubElement(annotation, 'filename').text = filename
    SubElement(annotation, 'path').text = '/home/labeller/images/' + filename

    if source is not None:
        source_el = SubElement(annotation, 'source')
        for key, value in source.items():
            SubElement(source_el, key).text = value

    size = SubElement(annotation, 'size')
    SubElement(size, 'width').text = str(width)
    SubElement(size, 'height').text = str(height)
    SubElement(size, 'depth').text = '3'

    SubElement(annotation, 'segmented').text = segmented

    for name, (xmin, ymin, xmax, ymax) in objects:
        obj = SubElement(annotation, 'object')
        SubElement(obj, 'name').text = name
        SubElement(obj, 'pose').text = 'Unspecified'
        SubElement(obj, 'truncated').text = '0'
        SubElement(obj, 'difficult').text = '0'
        bndbox = SubElement(obj, 'bndbox')
        SubElement(bndbox, 'xmin').text = str(xmin)
        SubElement(bndbox, 'ymin').text = str(ymin)
        SubElement(bndbox, 'xmax').text = str(xmax)
        SubElement(bndbox, 'ymax').text = str(ymax)

    os.makedirs(directory, exist_ok=True)
    xml_path = os.path.join(str(directory), xml_name)
    ElementTree(annotation).write(xml_path, encoding='utf-8')
    return xml_path


@pytest.fixture
def make_example(tmp_path):
    """Write an annotation and its image side by side, return the annotation path."""
    def _make(stem, image_bytes=b'\xff\xd8\xff\xe0fake-jpeg', ext='.jpg', objects=(('dog', (85, 1, 381, 244)),),
              directory=None, **kwargs):
        directory = str(directory or tmp_path / 'dataset')
        filename = stem + ext
        xml_path = write_annotation(directory, stem + '.xml', filename, objects=objects, **kwargs)
        if image_bytes is not None:
            with open(os.path.join(directory, filename), 'wb') as f:
                f.write(image_bytes)
        return xml_path

    return _make
