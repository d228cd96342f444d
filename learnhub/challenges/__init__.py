"""Read-side challenge catalog."""

from learnhub.challenges.service import ChallengeCatalogService

__all__ = ["ChallengeCatalogService"]
