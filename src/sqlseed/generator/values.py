"""Value generators: the external collaborator interface and the local fallback."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from faker import Faker

from ..graph.models import GenerationContext, SqlPredicate
from ..utils.exceptions import GeneratorUnavailableError
from ..utils.logging_config import get_logger
from ..values.classifier import TypeCategory, base_type, classify
from ..values.parser import (
    HASH_DATE_ANCHOR,
    parse_best_effort,
    stable_hash,
    try_parse_boolean,
    try_parse_datetime,
    try_parse_decimal,
    try_parse_integer,
)

if TYPE_CHECKING:
    from ..config import GeneratorConfig

logger = get_logger(__name__)

DATE_WINDOW_DAYS = 365
RANGE_SPAN = 100


class ValueGenerator(Protocol):
    """Produces one value per column per record."""

    def generate_value(self, context: GenerationContext, record_index: int) -> Any:
        ...

    def generate_batch(
        self, contexts: Sequence[GenerationContext], record_index: int
    ) -> dict[str, Any]:
        ...


def build_prompt(context: GenerationContext, record_index: int) -> str:
    """Describe a column and its constraints for an external generator."""
    column = context.column
    lines = [
        f"Generate one value for column {context.table_name}.{column.name}",
        f"Data type: {column.data_type}",
        f"Record number: {record_index}",
        f"Domain: {context.hints.domain}",
    ]
    if context.hints.semantic_hints:
        lines.append(f"Format hints: {', '.join(context.hints.semantic_hints)}")
    for constraint in context.constraints:
        lines.append(f"Constraint: {constraint.describe()}")
    for predicate in context.predicates:
        literal = ", ".join(predicate.values) if predicate.values else predicate.value
        lines.append(f"Must satisfy: {column.name} {predicate.operator} {literal}")
    if context.relationship is not None:
        lines.append(
            f"References {context.relationship.referenced_table}."
            f"{context.relationship.referenced_column}"
        )
    lines.append("Respond with the bare value only.")
    return "\n".join(lines)


class CallableValueGenerator:
    """
    Adapts a text-completion callable into a ValueGenerator.

    The callable receives the prompt and the generator configuration and
    returns the value as text. Empty answers, a missing endpoint and any
    exception raised by the callable surface as GeneratorUnavailableError
    so the caller can fall back to local generation.
    """

    def __init__(
        self,
        complete: Callable[[str, GeneratorConfig], str | None],
        config: GeneratorConfig,
    ) -> None:
        self.complete = complete
        self.config = config

    def generate_value(self, context: GenerationContext, record_index: int) -> Any:
        if not self.config.endpoint:
            raise GeneratorUnavailableError("No generator endpoint configured")

        prompt = build_prompt(context, record_index)
        try:
            answer = self.complete(prompt, self.config)
        except Exception as e:
            raise GeneratorUnavailableError(f"Generator call failed: {e}") from e

        if answer is None or not answer.strip():
            raise GeneratorUnavailableError(
                f"Generator returned no value for {context.table_name}."
                f"{context.column.name}"
            )
        return parse_best_effort(answer.strip())

    def generate_batch(
        self, contexts: Sequence[GenerationContext], record_index: int
    ) -> dict[str, Any]:
        return {c.column.name: self.generate_value(c, record_index) for c in contexts}


class LocalValueGenerator:
    """
    Generates plausible values without any external service.

    Values honour WHERE predicates first, then enum domains, then the
    column's category and name hints. Every value is derived from a Faker
    instance reseeded per (table, column, record), so output does not
    depend on thread scheduling.
    """

    def __init__(self, seed: int = 0, locale: str = "en_US") -> None:
        self.seed = seed
        self.locale = locale
        self._local = threading.local()

    def generate_value(self, context: GenerationContext, record_index: int) -> Any:
        faker = self._faker_for(context, record_index)
        column = context.column
        category = classify(column.data_type)

        if context.predicates:
            satisfied, value = self._satisfy_predicates(
                context, category, record_index, faker
            )
            if satisfied:
                return value

        if column.is_primary_key and category is TypeCategory.INTEGER:
            return record_index

        if context.allowed_values:
            return faker.random_element(context.allowed_values)

        if category is TypeCategory.BOOLEAN or (
            category is TypeCategory.INTEGER and context.looks_boolean
        ):
            return faker.pybool()

        value = self._value_for_category(context, category, record_index, faker)
        return self._avoid_excluded(context, value, record_index)

    def generate_batch(
        self, contexts: Sequence[GenerationContext], record_index: int
    ) -> dict[str, Any]:
        return {c.column.name: self.generate_value(c, record_index) for c in contexts}

    def _faker_for(self, context: GenerationContext, record_index: int) -> Faker:
        faker = getattr(self._local, "faker", None)
        if faker is None:
            faker = Faker(self.locale)
            self._local.faker = faker
        key = f"{self.seed}:{context.table_name}:{context.column.name}:{record_index}"
        faker.seed_instance(stable_hash(key.lower()))
        return faker

    # ------------------------------------------------------------------
    # Category defaults
    # ------------------------------------------------------------------

    def _value_for_category(
        self,
        context: GenerationContext,
        category: TypeCategory,
        record_index: int,
        faker: Faker,
    ) -> Any:
        column = context.column

        if category is TypeCategory.INTEGER:
            return faker.random_int(min=1, max=10000)

        if category is TypeCategory.DECIMAL:
            return self._decimal(context, faker)

        if category is TypeCategory.DATETIME:
            return self._datetime(context, faker)

        if category is TypeCategory.JSON or (
            context.looks_json and category in (TypeCategory.STRING, TypeCategory.UNKNOWN)
        ):
            return self._json(context, record_index, faker)

        if category is TypeCategory.BINARY:
            return faker.hexify("^" * 16)

        if base_type(column.data_type) in ("uuid", "uniqueidentifier"):
            return str(faker.uuid4())

        return self._string(context, record_index, faker)

    def _decimal(self, context: GenerationContext, faker: Faker) -> Decimal:
        column = context.column
        scale = column.scale if column.scale is not None else 2
        left_digits = 4
        if column.precision:
            left_digits = max(1, min(left_digits, column.precision - scale))
        return faker.pydecimal(
            left_digits=left_digits, right_digits=scale, positive=True
        )

    def _datetime(self, context: GenerationContext, faker: Faker) -> datetime | date:
        end = datetime.combine(HASH_DATE_ANCHOR, datetime.min.time())
        start = end - timedelta(days=DATE_WINDOW_DAYS)
        value = faker.date_time_between_dates(datetime_start=start, datetime_end=end)
        if base_type(context.column.data_type) == "date":
            return value.date()
        return value

    def _json(self, context: GenerationContext, record_index: int, faker: Faker) -> str:
        max_length = context.max_length
        if max_length is not None and max_length < 10:
            return "{}"
        if max_length is not None and max_length < 50:
            return json.dumps({"id": record_index}, separators=(",", ":"))
        document = {
            "id": record_index,
            "name": faker.word(),
            "active": faker.pybool(),
        }
        text = json.dumps(document, separators=(",", ":"))
        if max_length is not None and len(text) > max_length:
            return json.dumps({"id": record_index}, separators=(",", ":"))
        return text

    def _string(self, context: GenerationContext, record_index: int, faker: Faker) -> str:
        column_name = context.column.name.lower()
        hints = context.hints.semantic_hints
        suffix = f"_{record_index:02d}"
        unique = context.is_unique

        if "email_format" in hints:
            user = f"{faker.user_name()}{record_index}"
            text = f"{user}@{faker.free_email_domain()}"
            return _fit_length(text, context.max_length, str(record_index))
        if "phone_format" in hints:
            text = faker.numerify("555-###-####")
        elif "url_format" in hints:
            text = faker.url()
        elif "address_format" in hints:
            text = faker.street_address()
        elif "code_format" in hints:
            prefix = "".join(ch for ch in context.table_name.upper() if ch.isalpha())[:3]
            text = f"{prefix or 'C'}{record_index:04d}"
            return _fit_length(text, context.max_length, str(record_index))
        elif "name_format" in hints:
            if "first" in column_name:
                text = faker.first_name()
            elif "last" in column_name:
                text = faker.last_name()
            elif context.hints.domain == "user_management":
                text = faker.name()
            else:
                text = faker.word().title()
        elif context.looks_date:
            text = self._datetime(context, faker).strftime("%Y-%m-%d")
        else:
            text = faker.word()

        if unique:
            text += suffix
        return _fit_length(text, context.max_length, suffix if unique else "")

    # ------------------------------------------------------------------
    # Predicate satisfaction
    # ------------------------------------------------------------------

    def _satisfy_predicates(
        self,
        context: GenerationContext,
        category: TypeCategory,
        record_index: int,
        faker: Faker,
    ) -> tuple[bool, Any]:
        ranged: list[SqlPredicate] = []
        for predicate in context.predicates:
            operator = predicate.operator.upper()
            if operator == "=" and predicate.value is not None:
                if context.is_unique and record_index > 1:
                    return _beyond_literals(
                        context, category, (predicate.value,), record_index
                    )
                return True, _coerce(predicate.value, category)
            if operator == "IN" and predicate.values:
                if context.is_unique and record_index > len(predicate.values):
                    return _beyond_literals(
                        context, category, predicate.values, record_index
                    )
                chosen = predicate.values[(record_index - 1) % len(predicate.values)]
                return True, _coerce(chosen, category)
            if operator == "LIKE" and predicate.value is not None:
                return True, _like_value(predicate.value, record_index, faker)
            if operator == "YEAR_EQUALS" and predicate.value is not None:
                dated = _date_in_year(predicate.value, context, faker)
                if dated is not None:
                    return True, dated
            if operator in (">", ">=", "<", "<="):
                ranged.append(predicate)

        if ranged:
            return _value_in_range(ranged, category, faker)
        return False, None

    def _avoid_excluded(
        self, context: GenerationContext, value: Any, record_index: int
    ) -> Any:
        excluded = {
            (p.value or "").lower()
            for p in context.predicates
            if p.operator.upper() in ("!=", "<>", "NOT LIKE")
        }
        if excluded and str(value).lower() in excluded:
            if isinstance(value, bool):
                return not value
            if isinstance(value, int):
                return value + record_index
            return f"{value}_{record_index}"
        return value


def _coerce(text: str, category: TypeCategory) -> Any:
    if category is TypeCategory.INTEGER:
        parsed_int, ok = try_parse_integer(text)
        return parsed_int if ok else text
    if category is TypeCategory.DECIMAL:
        parsed_decimal, ok = try_parse_decimal(text)
        return parsed_decimal if ok else text
    if category is TypeCategory.DATETIME:
        parsed_dt, ok = try_parse_datetime(text)
        return parsed_dt if ok else text
    if category is TypeCategory.BOOLEAN:
        parsed_bool, ok = try_parse_boolean(text)
        return parsed_bool if ok else text
    return text


def _beyond_literals(
    context: GenerationContext,
    category: TypeCategory,
    literals: Sequence[str],
    record_index: int,
) -> tuple[bool, Any]:
    """
    Value for a unique column once every predicate literal has been used.

    Numbers continue upward from the largest literal and text gets a
    record suffix, so no two records share a value. Other categories
    report no match and take the regular generation path.
    """
    overflow = record_index - len(literals)
    if category in (TypeCategory.INTEGER, TypeCategory.DECIMAL):
        numbers = [
            v
            for v in (_coerce(literal, category) for literal in literals)
            if isinstance(v, (int, Decimal)) and not isinstance(v, bool)
        ]
        if numbers:
            return True, max(numbers) + overflow
        return False, None
    if category in (TypeCategory.STRING, TypeCategory.UNKNOWN):
        suffix = f"_{record_index:02d}"
        return True, _fit_length(f"{literals[0]}{suffix}", context.max_length, suffix)
    return False, None


def _like_value(pattern: str, record_index: int, faker: Faker) -> str:
    core = pattern.replace("%", "").replace("_", "x").strip()
    if not core:
        return f"{faker.word()}_{record_index:03d}"
    starts_open = pattern.startswith("%")
    ends_open = pattern.endswith("%")
    if starts_open and ends_open:
        return f"{faker.word()} {core} {record_index}"
    if ends_open:
        return f"{core}_{record_index:03d}"
    if starts_open:
        return f"{record_index:03d}_{core}"
    return core


def _date_in_year(year_text: str, context: GenerationContext, faker: Faker) -> Any:
    year, ok = try_parse_integer(year_text)
    if not ok or not 1 <= year <= 9999:
        return None
    start = datetime(year, 1, 1)
    end = datetime(year, 12, 31, 23, 59, 59)
    value = faker.date_time_between_dates(datetime_start=start, datetime_end=end)
    if base_type(context.column.data_type) == "date":
        return value.date()
    return value


def _value_in_range(
    predicates: list[SqlPredicate], category: TypeCategory, faker: Faker
) -> tuple[bool, Any]:
    if category is TypeCategory.INTEGER:
        low, high = None, None
        for p in predicates:
            bound, ok = try_parse_integer(p.value)
            if not ok:
                continue
            if p.operator in (">", ">="):
                candidate = bound + 1 if p.operator == ">" else bound
                low = candidate if low is None else max(low, candidate)
            else:
                candidate = bound - 1 if p.operator == "<" else bound
                high = candidate if high is None else min(high, candidate)
        if low is None and high is None:
            return False, None
        if low is None:
            low = high - RANGE_SPAN
        if high is None:
            high = low + RANGE_SPAN
        return True, faker.random_int(min=low, max=max(low, high))

    if category is TypeCategory.DECIMAL:
        low_d, high_d = None, None
        for p in predicates:
            bound_d, ok = try_parse_decimal(p.value)
            if not ok:
                continue
            step = Decimal("0.01") if p.operator in (">", "<") else Decimal(0)
            if p.operator in (">", ">="):
                low_d = bound_d + step if low_d is None else max(low_d, bound_d + step)
            else:
                high_d = bound_d - step if high_d is None else min(high_d, bound_d - step)
        if low_d is None and high_d is None:
            return False, None
        if low_d is None:
            low_d = high_d - RANGE_SPAN
        if high_d is None:
            high_d = low_d + RANGE_SPAN
        fraction = Decimal(faker.random_int(min=0, max=100)) / 100
        value = low_d + (max(high_d, low_d) - low_d) * fraction
        return True, value.quantize(Decimal("0.01"))

    if category is TypeCategory.DATETIME:
        low_t, high_t = None, None
        for p in predicates:
            bound_t, ok = try_parse_datetime(p.value)
            if not ok or bound_t is None:
                continue
            if p.operator in (">", ">="):
                candidate_t = bound_t + timedelta(days=1)
                low_t = candidate_t if low_t is None else max(low_t, candidate_t)
            else:
                candidate_t = bound_t - timedelta(days=1)
                high_t = candidate_t if high_t is None else min(high_t, candidate_t)
        if low_t is None and high_t is None:
            return False, None
        if low_t is None:
            low_t = high_t - timedelta(days=DATE_WINDOW_DAYS)
        if high_t is None:
            high_t = low_t + timedelta(days=DATE_WINDOW_DAYS)
        value_t = faker.date_time_between_dates(
            datetime_start=low_t, datetime_end=max(low_t, high_t)
        )
        return True, value_t

    return False, None


def _fit_length(text: str, max_length: int | None, keep_suffix: str = "") -> str:
    """Truncate to the column length, keeping the uniqueness suffix when it fits."""
    if not text:
        text = keep_suffix.lstrip("_") or "x"
    if max_length is None or max_length <= 0 or len(text) <= max_length:
        return text
    if keep_suffix and len(keep_suffix) < max_length:
        return text[: max_length - len(keep_suffix)] + keep_suffix
    if keep_suffix:
        return keep_suffix.lstrip("_")[-max_length:]
    return text[:max_length]
