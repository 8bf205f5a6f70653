from typing import BinaryIO, Union


class StorageProvider:
    def put(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        raise NotImplementedError

    def public_url(self, key: str) -> str:
        raise NotImplementedError
