import os

from .reporter import Reporter

EXTENSION = ".mni"

def file_exists(name):
    return os.path.exists(name)

class Tools:
    def __init__(self, reporter: Reporter):
        self.reporter = reporter

    def load(self, path):
        """
        return (source, base name) of a script, or None after reporting
        why it could not be read
        """
        if not path.endswith(EXTENSION):
            self.reporter(f"Mani scripts must end with '{EXTENSION}'.")
            return None

        try:
            with open(path, "rb") as f:
                data = f.read()

        except FileNotFoundError:
            self.reporter(f"{path}: File not Found")
            return None

        except OSError as e:
            self.reporter(f"{path}: {e.strerror}")
            return None

        try:
            source = data.decode()
        except UnicodeDecodeError as e:
            self.reporter(f"{path}: {e.reason}")
            return None

        return source, os.path.basename(path)
