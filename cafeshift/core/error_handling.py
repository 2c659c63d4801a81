"""
Error handling helpers shared by the endpoint modules.
"""
from functools import wraps
from typing import Callable, Any
from uuid import UUID
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
import logging

from cafeshift.core.config import settings

logger = logging.getLogger(__name__)


def parse_uuid(uuid_string: str, entity_name: str = "ID") -> UUID:
    """Parse a path or query id; malformed ids are a 400, not a 500."""
    try:
        return UUID(str(uuid_string))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {entity_name.lower()}: '{uuid_string}'. Must be a valid UUID.",
        )


def _unexpected_error_detail(op_name: str, error: Exception) -> str:
    if settings.ENVIRONMENT.lower() in ["prod", "production"]:
        return "An unexpected error occurred while processing your request. Please try again later."

    error_detail = str(error)
    if "no such table" in error_detail.lower() or "no such column" in error_detail.lower():
        error_detail = f"Database schema is out of date; run run_migrations.py. Original error: {error_detail}"
    return f"Error in {op_name}: {type(error).__name__}: {error_detail}"


def handle_endpoint_errors(
    operation_name: str = None,
    log_error: bool = True,
):
    """
    Decorator to standardize error handling across all endpoints.

    - HTTPException passes through untouched
    - IntegrityError (unique or foreign key violation) becomes 400
    - ValueError becomes 400
    - anything else is logged and becomes 500

    Usage:
        @handle_endpoint_errors(operation_name="process_payroll")
        async def process_payroll_endpoint(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except IntegrityError as e:
                if log_error:
                    logger.warning(f"Integrity error in {op_name}: {e.orig}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Request conflicts with existing data",
                )
            except ValueError as e:
                if log_error:
                    logger.warning(f"Value error in {op_name}: {str(e)}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid input: {str(e)}",
                )
            except Exception as e:
                if log_error:
                    logger.error(
                        f"Unexpected error in {op_name}",
                        exc_info=True,
                        extra={
                            "operation": op_name,
                            "error_type": type(e).__name__,
                        }
                    )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=_unexpected_error_detail(op_name, e),
                )
        return wrapper
    return decorator
