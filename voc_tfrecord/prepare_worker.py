# prepare_worker.py
"""
Prepare a PASCAL-VOC dataset for TensorFlow.

- Parse the PASCAL-VOC files found under the input directory
- Generate the label_map.txt file required by the object detection API
- Split the data into a training set and a test set
- Generate a tfrecord file for each set
"""
import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import config
from .errors import AnnotationParseError, ExampleError, ImageReadError, PrepareError
from .formats.features import FeatureEncoder, read_image
from .formats.internal_data import Annotation
from .formats.readers.voc_reader import VocReader, find_annotation_files
from .formats.writers.tfrecord_writer import TfrecordWriter
from .label_map import LabelRegistry
from .partition import split


@dataclass
class Report:
    valid_annotations: int = 0
    invalid_annotations: List[Tuple[str, AnnotationParseError]] = field(default_factory=list)
    ignored_examples: int = 0
    labels: Optional[str] = None
    train: Optional[str] = None
    test: Optional[str] = None

    def total_examples(self) -> int:
        return self.valid_annotations + len(self.invalid_annotations)

    def written_files(self) -> List[str]:
        return [path for path in (self.labels, self.test, self.train) if path]

    def summary_lines(self) -> List[str]:
        lines = []
        if self.test and self.train:
            lines.append(f"Done, 3 files were written, found {self.total_examples()} examples.")
        elif self.test or self.train:
            lines.append(f"Done, 2 files were written, one dataset was empty, "
                         f"found {self.total_examples()} examples.")
        else:
            lines.append(f"Done, only the label map was written, found {self.total_examples()} examples.")

        if self.ignored_examples:
            lines.append(f"{self.ignored_examples} example(s) were ignored while generating tfrecord files.")

        if self.invalid_annotations:
            lines.append(f"{len(self.invalid_annotations)} example(s) could not be processed:")
            for path, error in self.invalid_annotations:
                lines.append(f"   - In {path} - {error}")
        return lines


class PrepareWorker:
    def __init__(self, config):
        self.config = config
        self.report = Report()

    def run(self) -> Report:
        input_dir = self.config['input_dir']
        output_dir = self.config['output_dir']
        test_ratio = self.config['test_ratio']

        logging.info(f"Preparing dataset from {input_dir} into {output_dir} (test ratio {test_ratio}%)")
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise PrepareError('output', output_dir, "Could not create output directory") from e

        annotations = self._load_annotations(input_dir)

        # First pass: every label of the dataset must be known before encoding
        label_map = LabelRegistry.from_annotations(annotations)
        label_map_path = os.path.join(output_dir, config.LABEL_MAP_FILENAME)
        label_map.persist(label_map_path)
        self.report.labels = label_map_path

        # Each image is read once: its bytes key the split and become image/encoded
        examples = [(annotation, _read_image_bytes(annotation)) for annotation in annotations]
        test_set, train_set = split(examples, test_ratio, key=lambda example: example[1])
        logging.info(f"Split result: {len(train_set)} train, {len(test_set)} test.")

        encoder = FeatureEncoder(label_map)
        self.report.test = self._gen_tfrecord(encoder, test_set, output_dir, config.TEST_SPLIT_NAME)
        self.report.train = self._gen_tfrecord(encoder, train_set, output_dir, config.TRAIN_SPLIT_NAME)
        return self.report

    def _load_annotations(self, input_dir) -> List[Annotation]:
        annotations = []
        for path in find_annotation_files(input_dir):
            try:
                annotations.append(VocReader(path).read())
            except AnnotationParseError as e:
                logging.warning(f"Skipping {path}: {e}")
                self.report.invalid_annotations.append((path, e))
        self.report.valid_annotations = len(annotations)
        logging.info(f"Found {len(annotations)} valid annotation(s), "
                     f"{len(self.report.invalid_annotations)} invalid.")
        return annotations

    def _gen_tfrecord(self, encoder, examples, output_dir, split_name) -> Optional[str]:
        filename = config.record_filename(split_name)
        if not examples:
            logging.warning(f"{filename} dataset is empty, tfrecord won't be generated")
            return None

        writer = TfrecordWriter(output_dir, filename)
        for annotation, encoded in examples:
            try:
                writer.write(encoder.encode(annotation, encoded))
            except ExampleError as e:
                logging.warning(f"Ignoring {annotation.system_path}: {e}")
                self.report.ignored_examples += 1
        return writer.finalize()


def _read_image_bytes(annotation: Annotation) -> Optional[bytes]:
    try:
        return read_image(annotation)
    except ImageReadError as e:
        logging.warning(f"{e}, placing it in the training set")
        return None


def prepare(input_dir, output_dir, test_ratio) -> Report:
    """Run the whole preparation. Per-example failures are reported, per-stage failures raise PrepareError."""
    worker = PrepareWorker({
        'input_dir': input_dir,
        'output_dir': output_dir,
        'test_ratio': test_ratio,
    })
    return worker.run()
