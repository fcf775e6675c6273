class HdcError(Exception):
    pass


class HdcCommandError(HdcError):
    def __init__(self, command, returncode, stderr):
        super().__init__(
            "hdc failed ({}): {}\n{}".format(returncode, command, (stderr or "").strip())
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class InputValidationError(ValueError):
    pass
