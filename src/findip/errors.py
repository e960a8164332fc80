"""Base exceptions for findip."""


class FindIpError(Exception):
    """Base exception for all findip errors."""

    pass


class IpConflictError(FindIpError):
    """Lookup services reported more than one distinct IP address."""

    def __init__(self, readings: list[str]):
        self.readings = list(readings)
        listing = "\n".join(self.readings)
        super().__init__(
            f"Multiple IPs were reported back from the list of services\n{listing}"
        )


class NoIpAddressesFoundError(FindIpError):
    """No IP address is available."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No IP addresses were found. Most likely, a query has not been run."
        )


class InvalidInputError(FindIpError):
    """An input (usually configuration) was unexpected."""

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"An input was unexpected. Context: {context}")


class FileOpenFailedError(FindIpError):
    """Notification file could not be opened."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Failed to open file at path {self.path}")


class FileWriteFailedError(FindIpError):
    """Notification file could not be written."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Failed to write IP address to file at path {self.path}")


class S3WriteFailedError(FindIpError):
    """Upload to S3 failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to write IP address to S3. Reason: {reason}")


class RestRequestFailedError(FindIpError):
    """REST webhook call failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to make a REST request. Reason: {reason}")


class GenericError(FindIpError):
    """Anything that does not fit the other error kinds."""

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"An error was encountered. Context: {context}")
