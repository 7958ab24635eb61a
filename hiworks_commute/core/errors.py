class WorkerError(RuntimeError):
    """Base class for failures the worker reports back as a failed response."""


class ConfigurationError(WorkerError):
    """A required credential (company URL, username or password) is not stored."""


class ElementNotFoundError(WorkerError):
    """An expected control did not become visible within its bounded wait."""


class PromptNotShownError(ElementNotFoundError):
    """A confirmation dialog expected after an action never appeared."""


class AuthenticationError(WorkerError):
    """The login form was submitted but the page stayed on the login site."""


class ProtocolError(WorkerError):
    """An input line could not be turned into a command."""
