from typing import Protocol


class UnitOfWork(Protocol):
    """Transaction boundary shared by the repositories of one request.

    Repository writes that belong together are staged and only become
    durable on ``commit``; ``rollback`` discards everything staged since the
    last commit.
    """

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
