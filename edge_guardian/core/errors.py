"""Failure kinds raised by the pipeline components and caught by the pipeline."""


class AlertPipelineError(Exception):
    """Base class; the message is what the dashboard shows."""


class InputValidationError(AlertPipelineError):
    pass


class ConfigurationError(AlertPipelineError):
    pass


class ClassificationError(AlertPipelineError):
    pass


class ClassifierConnectionError(ClassificationError):
    def __init__(self) -> None:
        super().__init__(
            "Could not connect to the analysis service. "
            "Please check your network connection and try again."
        )


class ClassifierServiceError(ClassificationError):
    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(
            f"The analysis service returned an error (status {status}). Please try again."
        )


class ClassifierEmptyResponseError(ClassificationError):
    def __init__(self) -> None:
        super().__init__("The analysis service returned an empty response.")


class ClassifierProtocolError(ClassificationError):
    def __init__(self) -> None:
        super().__init__("The analysis service returned an unexpected data structure.")


class AlertGenerationError(AlertPipelineError):
    pass


class NotificationError(AlertPipelineError):
    pass
