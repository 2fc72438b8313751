"""Typed failures raised by the pipeline collaborators."""


class PipelineError(Exception):
    """Base class for failures of a single pipeline stage."""


class FetchError(PipelineError):
    pass


class TransformError(PipelineError):
    pass


class StoreError(PipelineError):
    pass


class CatalogError(PipelineError):
    pass


class ConflictError(CatalogError):
    """A catalog entry with the same (brand, name) key already exists."""


class PublishError(PipelineError):
    pass
