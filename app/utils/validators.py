"""
Validation helpers shared by schemas, services and routers.
"""

import re
import uuid
from typing import Any, Iterable, List, Optional

from app.utils.exceptions import InvalidIdFormatError, InvalidQueryError


class ValidationUtils:
    """
    Reusable validation methods for request input.
    """

    PHONE_PATTERN = re.compile(r'^\+\d{10,15}$')
    BUDGET_PATTERN = re.compile(r'^\d+(\.\d+)?$')

    @staticmethod
    def parse_id(value: Any, resource: str) -> uuid.UUID:
        """
        Parse an entity identifier.

        Raises:
            InvalidIdFormatError: If the value is not a UUID
        """
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value).strip())
        except (ValueError, AttributeError, TypeError):
            raise InvalidIdFormatError(resource, str(value))

    @staticmethod
    def validate_phone(phone: Any) -> str:
        phone_str = str(phone or "").strip()
        if not ValidationUtils.PHONE_PATTERN.match(phone_str):
            raise ValueError("Phone must start with + followed by 10 to 15 digits")
        return phone_str

    @staticmethod
    def validate_budget(budget: Any) -> str:
        budget_str = "" if budget is None else str(budget).strip()
        if not ValidationUtils.BUDGET_PATTERN.match(budget_str):
            raise ValueError("Budget must be a non-negative number")
        return budget_str

    @staticmethod
    def parse_bool_flag(value: Optional[str], field_name: str) -> Optional[bool]:
        """
        Parse a 'true'/'false' query flag. Empty means no filter.

        Raises:
            InvalidQueryError: For any other value
        """
        if value is None or value == "":
            return None
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise InvalidQueryError(f"{field_name} must be 'true' or 'false'")

    @staticmethod
    def normalize_string_list(values: Optional[Iterable[str]]) -> List[str]:
        """
        Flatten repeated and comma separated form values, keeping order.

        ``["Wifi, AC", "Parking"]`` becomes ``["Wifi", "AC", "Parking"]``.
        Duplicates are dropped after their first occurrence.
        """
        result: List[str] = []
        for raw in values or []:
            if raw is None:
                continue
            for item in str(raw).split(","):
                item = item.strip()
                if item and item not in result:
                    result.append(item)
        return result
