class StorageError(ValueError):
    pass

class RecordNotFound(StorageError):
    def __init__(self, entity_name: str, key: str, value) -> None:
        super().__init__(f"{entity_name} with {key}={value} not found")
        self.entity_name = entity_name
        self.key = key
        self.value = value

class DuplicateRecord(StorageError):
    def __init__(self, entity_name: str, key: str, value) -> None:
        super().__init__(f"{entity_name} with {key}={value} already exists")
        self.entity_name = entity_name
        self.key = key
        self.value = value
