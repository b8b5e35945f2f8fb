import os
import logging
import struct

import google_crc32c
import tensorflow as tf

from .base_writer import BaseWriter
from ..features import BytesList, Feature, FeatureRecord, FloatList, Int64List
from ...errors import PrepareError

MASK_DELTA = 0xA282EAD8
LENGTH_FORMAT = '<Q'
CRC_FORMAT = '<I'
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)
CRC_SIZE = struct.calcsize(CRC_FORMAT)


def crc32c(data: bytes) -> int:
    """CRC-32C (Castagnoli polynomial). Not the IEEE CRC-32 used for partitioning."""
    return google_crc32c.value(bytes(data))


def masked_crc32c(data: bytes) -> int:
    crc = crc32c(data)
    rotated = ((crc >> 15) | (crc << 17)) & 0xFFFFFFFF
    return (rotated + MASK_DELTA) & 0xFFFFFFFF


def encode_frame(payload: bytes) -> bytes:
    """
    Wrap a serialized record in a TFRecord frame:

        uint64 length | uint32 masked_crc32c(length) | payload | uint32 masked_crc32c(payload)

    all little-endian.
    """
    length = struct.pack(LENGTH_FORMAT, len(payload))
    return b''.join((
        length,
        struct.pack(CRC_FORMAT, masked_crc32c(length)),
        payload,
        struct.pack(CRC_FORMAT, masked_crc32c(payload)),
    ))


def to_tf_feature(feature: Feature):
    if isinstance(feature, Int64List):
        return tf.train.Feature(int64_list=tf.train.Int64List(value=feature.value))
    if isinstance(feature, FloatList):
        return tf.train.Feature(float_list=tf.train.FloatList(value=feature.value))
    if isinstance(feature, BytesList):
        return tf.train.Feature(bytes_list=tf.train.BytesList(value=feature.value))
    raise TypeError(f"Not a feature: {feature!r}")


def serialize_record(record: FeatureRecord) -> bytes:
    feature = {name: to_tf_feature(value) for name, value in record.to_features().items()}
    tf_example = tf.train.Example(features=tf.train.Features(feature=feature))
    return tf_example.SerializeToString()


class TfrecordWriter(BaseWriter):
    """
    Writer for one TFRecord file.

    Records are framed into an in-memory buffer and written as a single file
    by `finalize`. There is no size-based rollover.
    """

    def __init__(self, output_dir: str, filename: str):
        super().__init__(output_dir)
        self.record_path = os.path.join(self.output_dir, filename)
        self.buffer = bytearray()
        self.count = 0

    def write(self, record: FeatureRecord):
        self.buffer += encode_frame(serialize_record(record))
        self.count += 1

    def finalize(self) -> str:
        try:
            with open(self.record_path, 'wb') as f:
                f.write(self.buffer)
        except OSError as e:
            raise PrepareError('records', self.record_path, "Could not write tfrecord file") from e
        logging.info(f"Wrote {self.count} record(s) ({len(self.buffer)} bytes) to {self.record_path}")
        return self.record_path
