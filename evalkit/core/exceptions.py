"""Exception types raised across evalkit."""


class InvalidInputError(ValueError):
    """
    Raised for inputs that cannot be scored or compared.

    Covers mismatched prediction/label lengths, empty evaluation sets,
    malformed confusion matrices, comparison arity mismatches and epoch
    regressions in a tracker history. Always surfaced to the caller.
    """


class ExportFailure(RuntimeError):
    """
    Raised by an exporter when a snapshot could not be written or pushed.

    The tracker logs and skips these so one failing sink never blocks the
    others or corrupts the recorded history.
    """

    def __init__(self, exporter: str, message: str):
        super().__init__(f"{exporter}: {message}")
        self.exporter = exporter
        self.message = message
