"""Exception hierarchy shared by the analysis pipeline and its collaborators."""


class BillIntelError(Exception):
    """Base exception for BillIntel."""
    pass


class InputError(BillIntelError):
    """No billing data was supplied, or the payload could not be decoded."""
    pass


class CollaboratorError(BillIntelError):
    """A narrative or storage collaborator failed.

    The pipeline recovers from these locally; they never reach the caller.
    """
    pass
