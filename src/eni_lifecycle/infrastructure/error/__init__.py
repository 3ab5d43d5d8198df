from eni_lifecycle.infrastructure.error.error_classifier import Classification, ErrorClassifier

__all__: list[str] = ["Classification", "ErrorClassifier"]
