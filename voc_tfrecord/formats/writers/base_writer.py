from abc import ABC, abstractmethod
import os

from ...errors import PrepareError


class BaseWriter(ABC):
    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        self.setup_directories()

    def setup_directories(self):
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise PrepareError('output', self.output_dir, "Could not create output directory") from e

    @abstractmethod
    def write(self, record):
        pass

    @abstractmethod
    def finalize(self):
        pass
