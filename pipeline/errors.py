class AnalysisError(Exception):
    pass


class InvalidInputError(AnalysisError):
    """Raised when the record set is not tabular (empty or malformed)."""


class ConfigError(AnalysisError):
    pass
