"""Configuration errors."""


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))
