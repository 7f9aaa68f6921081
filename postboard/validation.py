"""
Postboard Backend — Input Validation Rules
============================================

What:  Declarative per-field rules for user registration and post input.
How:   Each FieldRule names a field, the message to report and a predicate.
       validate() runs every rule of a rule set and raises one ValidationError
       (422) carrying all failures, so clients can surface every problem at once.
Who:   UserService.create_user, PostService.create_post / update_post.
When:  Before any write reaches the database.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Sequence

from email_validator import EmailNotValidError, validate_email

from postboard.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 5
MIN_TEXT_LENGTH = 5


def is_email(value: Any) -> bool:
    """Syntax-only check; deliverability (DNS) is never queried."""
    if not isinstance(value, str) or not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def min_length(length: int) -> Callable[[Any], bool]:
    """Predicate: a non-empty string of at least `length` characters."""

    def check(value: Any) -> bool:
        return isinstance(value, str) and value != "" and len(value) >= length

    return check


@dataclass(frozen=True)
class FieldRule:
    field: str
    message: str
    check: Callable[[Any], bool]


USER_RULES: Sequence[FieldRule] = (
    FieldRule("email", "E-Mail is invalid.", is_email),
    FieldRule("password", "Password too short!", min_length(MIN_PASSWORD_LENGTH)),
)

POST_RULES: Sequence[FieldRule] = (
    FieldRule("title", "Title is invalid.", min_length(MIN_TEXT_LENGTH)),
    FieldRule("content", "Content is invalid.", min_length(MIN_TEXT_LENGTH)),
)


def failing_rules(data: Mapping[str, Any], rules: Sequence[FieldRule]) -> List[FieldRule]:
    """Runs every rule (no short-circuit) and returns the failures in rule order."""
    return [rule for rule in rules if not rule.check(data.get(rule.field))]


def validate(data: Mapping[str, Any], rules: Sequence[FieldRule]) -> None:
    """
    Raises:
        ValidationError: "Invalid input." with every failing rule in `data`
    """
    failures = failing_rules(data, rules)
    if failures:
        errors: List[Dict[str, str]] = [{"message": rule.message} for rule in failures]
        raise ValidationError(
            message="Invalid input.",
            data=errors,
            context={"fields": [rule.field for rule in failures]},
        )


def validate_user_input(email: str, password: str) -> None:
    validate({"email": email, "password": password}, USER_RULES)


def validate_post_input(title: str, content: str) -> None:
    validate({"title": title, "content": content}, POST_RULES)
