class NewsImageError(Exception):
    pass


class ConfigurationError(NewsImageError):
    pass


class ValidationError(NewsImageError):
    pass


class WorkflowError(NewsImageError):
    pass


class StorageError(NewsImageError):
    pass


class ExternalServiceError(NewsImageError):
    pass


class NewsSourceError(ExternalServiceError):
    pass


class LLMServiceError(ExternalServiceError):
    pass


class ImageGenerationError(ExternalServiceError):
    pass


class VectorStoreError(ExternalServiceError):
    pass
