from typing import Dict, Optional, Union


class Message:
    """Opaque payload handed to the pool for publishing."""

    def __init__(self, body: Union[bytes, str], content_type: Optional[str] = None, headers: Optional[Dict] = None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = bytes(body)
        self.content_type = content_type
        self.headers = dict(headers or {})

    def __len__(self):
        return len(self.body)

    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented
        return (self.body, self.content_type, self.headers) == (other.body, other.content_type, other.headers)

    def __repr__(self):
        return f"Message(body={self.body!r}, content_type={self.content_type!r})"
