from dataclasses import dataclass

OK = "OK"
E_BAD_MESSAGE = "E_BAD_MESSAGE"
E_PUB_FAILED = "E_PUB_FAILED"
E_DPUB_FAILED = "E_DPUB_FAILED"
E_MPUB_FAILED = "E_MPUB_FAILED"


@dataclass(frozen=True)
class Response:
    """Answer of a node to a publish: a status code and optional detail."""

    code: str
    detail: str = ""

    @classmethod
    def ok(cls) -> "Response":
        return cls(OK)

    def is_ok(self) -> bool:
        return self.code == OK

    def __str__(self):
        if self.detail:
            return f"{self.code} ({self.detail})"
        return self.code
