"""Reviews bounded context: product reviews, helpfulness votes and product ratings."""

import structlog
from protean.domain import Domain

reviews = Domain(name="reviews")

logger = structlog.get_logger(__name__)
