"""Knowledge base exceptions."""


class KnowledgeBaseError(Exception):
    """Base knowledge base error."""


class KnowledgeStoreError(KnowledgeBaseError):
    """A fact store write failed and was rolled back."""


class SeedDataError(KnowledgeBaseError):
    """Bundled fact data could not be read."""
