from abc import ABC, abstractmethod


class BaseReader(ABC):
    def __init__(self, path: str):
        self.path = path

    @abstractmethod
    def read(self):
        """
        Read the file at `self.path`.

        Raises:
            VocTfrecordError subclass describing why the file is unusable.
        """
        pass
