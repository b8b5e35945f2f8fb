class VocTfrecordError(Exception):
    pass


class ConfigError(VocTfrecordError, ValueError):
    """The run configuration is invalid. Raised before any processing starts."""


class PrepareError(VocTfrecordError):
    """A whole stage failed (output directory, label map or record file)."""

    def __init__(self, stage: str, path: str, message: str):
        super().__init__(f"{message}: {path}")
        self.stage = stage
        self.path = path


class AnnotationParseError(VocTfrecordError):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class ExampleError(VocTfrecordError):
    """A single example cannot be encoded. The batch keeps going."""


class UnsupportedFormatError(ExampleError):
    pass


class ImageReadError(ExampleError):
    pass


class UnknownLabelError(ExampleError, LookupError):
    def __init__(self, label: str):
        super().__init__(f"Label '{label}' is missing from the label map")
        self.label = label


class CorruptRecordError(VocTfrecordError):
    pass
