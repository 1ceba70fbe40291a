import copy
import json
import os
import tempfile


class JsonFileStorage:
    """
    Stores the whole mock database as a single pretty-printed JSON file.
    Every `get` reads the full file and every `put` overwrites it; errors
    propagate to the caller.
    """

    def __init__(self, path):
        self.path = path
        self.version = 0

    def exists(self):
        return os.path.exists(self.path)

    def get(self):
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def put(self, document):
        # Serialize first so a bad document never truncates the file
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        # Write beside the target and swap it in, so readers never see a half-written file
        fd, tmp_path = tempfile.mkstemp(prefix=".mock-db-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        self.version += 1


class MemoryStorage:
    """In-memory stand-in for JsonFileStorage, mainly for tests."""

    def __init__(self, document=None):
        self._document = copy.deepcopy(document)
        self.version = 0

    def exists(self):
        return self._document is not None

    def get(self):
        if self._document is None:
            raise FileNotFoundError("memory storage is empty")
        return copy.deepcopy(self._document)

    def put(self, document):
        # Round-trip through JSON so non-serializable values fail the same way
        self._document = json.loads(json.dumps(document))
        self.version += 1
