"""Convert PASCAL-VOC annotated images into TFRecord files for TensorFlow."""

__version__ = "0.1.0"
