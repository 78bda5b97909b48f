from .const import ERRORS


class ContainerError(ValueError):
    """Terminal decode outcome for a given buffer. Never retried."""

    code = ""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = ERRORS[self.code]
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FormatError(ContainerError):
    code = "E_FORMAT"


class TruncatedChunk(ContainerError):
    code = "E_TRUNCATED"


class NoRenderableImage(ContainerError):
    code = "E_NO_RENDERABLE"


class DecodeFailure(ContainerError):
    code = "E_DECODE"
