import struct
from typing import Iterator, List

import tensorflow as tf

from .base_reader import BaseReader
from ..writers.tfrecord_writer import (CRC_FORMAT, CRC_SIZE, LENGTH_FORMAT, LENGTH_SIZE,
                                       masked_crc32c)
from ...errors import CorruptRecordError

def decode_frames(data: bytes) -> Iterator[bytes]:
    """Yield the payload of every frame in `data`, checking both checksums of each."""
    view = memoryview(data)
    offset = 0
    index = 0
    while offset < len(view):
        header_end = offset + LENGTH_SIZE + CRC_SIZE
        if header_end > len(view):
            raise CorruptRecordError(f"Truncated header in record {index} at offset {offset}")

        length_bytes = bytes(view[offset:offset + LENGTH_SIZE])
        (length_crc,) = struct.unpack(CRC_FORMAT, view[offset + LENGTH_SIZE:header_end])
        if masked_crc32c(length_bytes) != length_crc:
            raise CorruptRecordError(f"Length checksum mismatch in record {index} at offset {offset}")

        (length,) = struct.unpack(LENGTH_FORMAT, length_bytes)
        payload_end = header_end + length
        if payload_end + CRC_SIZE > len(view):
            raise CorruptRecordError(f"Truncated payload in record {index} at offset {offset}")

        payload = bytes(view[header_end:payload_end])
        (payload_crc,) = struct.unpack(CRC_FORMAT, view[payload_end:payload_end + CRC_SIZE])
        if masked_crc32c(payload) != payload_crc:
            raise CorruptRecordError(f"Payload checksum mismatch in record {index} at offset {offset}")

        yield payload
        offset = payload_end + CRC_SIZE
        index += 1


def parse_example(payload: bytes):
    example = tf.train.Example()
    example.ParseFromString(payload)
    return example


class TfrecordReader(BaseReader):
    """Reads back the serialized records of a TFRecord file."""

    def read(self) -> List[bytes]:
        with open(self.path, 'rb') as f:
            data = f.read()
        return list(decode_frames(data))

    def read_examples(self) -> list:
        return [parse_example(payload) for payload in self.read()]
