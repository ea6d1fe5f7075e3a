"""Domain initialization and configuration."""

import structlog
from protean.domain import Domain

from storefront.utils.logging import configure_logging

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = structlog.get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
