"""Form value validation against declarative rules"""

from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from loguru import logger

from .exceptions import ValidationError

RuleResult = Tuple[bool, Optional[str]]
RuleChecker = Callable[[Any, str, Any], RuleResult]

RULES = ("required", "minlength", "maxlength", "type", "min", "max")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _to_number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _check_type(value: Any, kind: Any) -> RuleResult:
    if kind == "number":
        if str(value).isdigit():
            return True, None
        return False, "The input must contain only digits"

    if kind == "email":
        try:
            validate_email(str(value), check_deliverability=False)
        except EmailNotValidError as e:
            return False, str(e)
        return True, None

    if kind == "date":
        try:
            date.fromisoformat(str(value))
        except ValueError:
            return False, "The input does not appear to be a valid date"
        return True, None

    return True, None


def check_rule(value: Any, rule: str, parameter: Any) -> RuleResult:
    """
    Check one value against one rule

    Args:
        value: Submitted value
        rule: Rule name (required, minlength, maxlength, type, min, max)
        parameter: Rule parameter (length, bound or type name)

    Returns:
        Tuple of (is_valid, failure message or None)
    """
    if rule == "required":
        if parameter and _is_empty(value):
            return False, "Value is required and can't be empty"
        return True, None

    if rule == "minlength":
        if len(str(value if value is not None else "")) < int(parameter):
            return False, f"The input is less than {parameter} characters long"
        return True, None

    if rule == "maxlength":
        if len(str(value if value is not None else "")) > int(parameter):
            return False, f"The input is more than {parameter} characters long"
        return True, None

    if rule == "type":
        return _check_type(value, parameter)

    if rule in ("min", "max"):
        number = _to_number(value)
        if number is None:
            return False, "The input is not a number"
        if rule == "min" and number < float(parameter):
            return False, f"The input is not greater than or equal to '{parameter}'"
        if rule == "max" and number > float(parameter):
            return False, f"The input is not less than or equal to '{parameter}'"
        return True, None

    return True, None


class QuickValidator:
    """
    Validates a submitted form against per-field rules

    Usage:
        validator = QuickValidator({
            "fname": {"required": True, "minlength": 3, "label": "First name"},
            "age": {"type": "number", "min": 18},
        })
        if not validator.validate_with(request_form):
            errors = validator.messages
    """

    def __init__(self, rules: Mapping[str, Mapping[str, Any]], checker: RuleChecker = check_rule):
        self.rules = rules
        self.checker = checker
        self.valid: Optional[bool] = None
        self.messages: Dict[str, List[str]] = {}

    def _applies(self, rule: str, attributes: Mapping[str, Any]) -> bool:
        if rule not in RULES:
            return False
        if rule in ("min", "max"):
            return attributes.get("type") == "number"
        return True

    def validate_with(self, form: Mapping[str, Any]) -> bool:
        """
        Validate every ruled field of the form

        Returns:
            True if all rules passed

        Raises:
            ValidationError: If a ruled field is missing from the form
        """
        self.valid = True
        self.messages = {}

        for key, attributes in self.rules.items():
            if key not in form:
                raise ValidationError(f"The field '{key}' does not exist")

            for rule, parameter in attributes.items():
                if not self._applies(rule, attributes):
                    continue

                is_valid, message = self.checker(form[key], rule, parameter)
                if not is_valid:
                    self.valid = False
                    self.messages.setdefault(key, []).append(message or f"Rule '{rule}' failed")

        if not self.valid:
            logger.debug(f"Form validation failed for fields: {', '.join(self.messages)}")
        return self.valid

    def is_valid(self) -> Optional[bool]:
        """Result of the last validation, None before any"""
        return self.valid
