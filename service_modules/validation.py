"""
Validation Engine - pure checks run before any upload or write.

A rule set is an ordered list of rules. validate() stops at the first rule
that fails and raises a ValidationError carrying the message shown to the
operator, so the order of a rule set is the order the operator sees problems.
"""
import re
from typing import Callable, Iterable, List, Optional

from .exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_LENGTH = 10


class ValidationContext:
    """What a rule may know besides the form values."""

    def __init__(self, editing: bool = False, record_count: int = 0):
        self.editing = editing
        self.record_count = record_count


Rule = Callable[[dict, ValidationContext], None]


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def count_words(text) -> int:
    """Whitespace-delimited tokens after trimming. Consecutive spaces are one separator."""
    return len(_text(text).split())


def validate(rules: Iterable[Rule], values: dict, context: Optional[ValidationContext] = None):
    context = context or ValidationContext()
    for rule in rules:
        rule(values, context)


# ==================== RULE BUILDERS ====================

def required(fields: List[str], message: str = "Please fill in all fields") -> Rule:
    def check(values, context):
        for field in fields:
            if not _text(values.get(field)):
                raise ValidationError(message)
    return check


def required_media(fields: List[str], message: str = "Please select an image") -> Rule:
    def check(values, context):
        for field in fields:
            if not values.get(field):
                raise ValidationError(message)
    return check


def max_words(field: str, limit: int, label: str, show_count: bool = True) -> Rule:
    def check(values, context):
        words = count_words(values.get(field))
        if words > limit:
            message = f"{label} must be {limit} words or less."
            if show_count:
                message = f"{label} must be {limit} words or less. Current: {words}"
            raise ValidationError(message, title="Limit Exceeded")
    return check


def content_word_limit(field: str, limit: int, label: str = "Content") -> Rule:
    def check(values, context):
        if count_words(values.get(field)) > limit:
            raise ValidationError(f"{label} exceeds {limit} words limit")
    return check


def single_word(field: str, label: str) -> Rule:
    def check(values, context):
        if len(_text(values.get(field)).split()) != 1:
            raise ValidationError(f"{label} must be a single word")
    return check


def email_format(field: str = "email") -> Rule:
    def check(values, context):
        if not EMAIL_PATTERN.match(_text(values.get(field))):
            raise ValidationError("Please enter a valid email address")
    return check


def min_length(field: str = "phone", limit: int = MIN_PHONE_LENGTH,
               message: str = "Please enter a valid phone number") -> Rule:
    def check(values, context):
        if len(_text(values.get(field))) < limit:
            raise ValidationError(message)
    return check


def numeric(field: str, label: str) -> Rule:
    def check(values, context):
        try:
            float(_text(values.get(field)))
        except ValueError:
            raise ValidationError(f"{label} must be a number")
    return check


def _whole_number(value) -> Optional[int]:
    """int or integral string; floats and bools are not ratings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
        return int(value.strip())
    return None


def rating_range(field: str = "rating", low: int = 1, high: int = 5) -> Rule:
    def check(values, context):
        rating = _whole_number(values.get(field))
        if rating is None or not low <= rating <= high:
            raise ValidationError(f"Rating must be between {low} and {high}")
    return check


def max_records(limit: int, message: str) -> Rule:
    """Collection cap. Only checked when creating, never when editing."""
    def check(values, context):
        if not context.editing and context.record_count >= limit:
            raise ValidationError(message, title="Limit Reached")
    return check


def max_items(field: str, limit: int, label: str) -> Rule:
    def check(values, context):
        items = values.get(field) or []
        if not isinstance(items, list):
            raise ValidationError(f"{label.capitalize()} must be a list")
        if len(items) > limit:
            raise ValidationError(f"You can only add up to {limit} {label}.", title="Limit Reached")
    return check


def add_list_item(items: List[str], value: str, limit: int, label: str) -> List[str]:
    """Append a trimmed entry to a repeated sub-field. Blank input leaves the list as is."""
    entry = _text(value)
    if not entry:
        return list(items)
    if len(items) >= limit:
        raise ValidationError(f"You can only add up to {limit} {label}.", title="Limit Reached")
    return list(items) + [entry]


def remove_list_item(items: List[str], index: int) -> List[str]:
    result = list(items)
    if 0 <= index < len(result):
        result.pop(index)
    return result
