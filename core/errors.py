"""Exception hierarchy for the generation pipeline."""


class ArtifactForgeError(Exception):
    """Base class for every error raised by the pipeline."""


class ProviderUnavailable(ArtifactForgeError):
    """The generation provider cannot be reached or is not configured."""


class InvocationError(ArtifactForgeError):
    """A generation call failed and no fallback path remains."""

    def __init__(self, message, source="provider"):
        super().__init__(message)
        self.source = source


class ExtractionError(ArtifactForgeError):
    """An extraction strategy could not parse the raw text."""


class ValidationError(ArtifactForgeError):
    """A validator collaborator failed to produce an outcome."""

    def __init__(self, message, artifact_name=""):
        super().__init__(message)
        self.artifact_name = artifact_name
