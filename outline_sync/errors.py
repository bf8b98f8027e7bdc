"""Exceptions raised by outline-sync."""


class HostError(Exception):
    """A host mutation or read could not be carried out."""


class ReconcileError(Exception):
    """
    A reconciliation pass stopped at its first failed mutation.

    Mutations applied before the failure are kept; the tree is left partially
    converged and the caller decides whether to retry.
    """

    STAGES = ("update", "move", "create", "delete")

    def __init__(self, stage: str, index: int, cause: BaseException):
        self.stage = stage
        self.index = index
        self.cause = cause
        super().__init__(f"Failed to {stage} block at index {index}: {cause}")
