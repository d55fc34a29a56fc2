"""Standardized error handling for storage operations.

Provides consistent error logging and error response creation.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from DIAGRAMSTORE.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Context information for error handling."""
    operation: str
    collection: Optional[str] = None
    diagram_id: Optional[str] = None
    entity_id: Optional[str] = None
    url: Optional[str] = None
    additional_context: Dict[str, Any] = field(default_factory=dict)


def log_error_with_context(
    error: BaseException,
    context: ErrorContext,
    level: str = "error"
) -> None:
    """
    Log error with full context information.
    
    Args:
        error: The exception that occurred
        context: Error context information
        level: Log level ("error", "warning", "critical")
    """
    log_msg_parts = [f"Error in {context.operation}"]
    
    if context.collection:
        log_msg_parts.append(f"Collection: {context.collection}")
    if context.diagram_id:
        log_msg_parts.append(f"Diagram: {context.diagram_id}")
    if context.entity_id:
        log_msg_parts.append(f"Entity: {context.entity_id}")
    if context.url:
        log_msg_parts.append(f"URL: {context.url}")
    
    log_msg = " | ".join(log_msg_parts)
    exc_info = (type(error), error, error.__traceback__)
    
    if level == "critical":
        logger.critical(f"{log_msg}: {error}", exc_info=exc_info)
    elif level == "warning":
        logger.warning(f"{log_msg}: {error}", exc_info=exc_info)
    else:
        logger.error(f"{log_msg}: {error}", exc_info=exc_info)
    
    if context.additional_context:
        logger.debug(f"Additional context: {context.additional_context}")


def create_error_response(error: BaseException, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Create the `{error: message}` body returned by the record service.
    
    Args:
        error: The exception that occurred
        message: Message to expose instead of str(error)
        
    Returns:
        Dictionary with a single "error" key
    """
    return {"error": message if message is not None else str(error)}
