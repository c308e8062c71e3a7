from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CalendarLocale:
    """Names and labels used to render calendar text.

    Weekday sequences are Monday-first. Month sequences are January-first.
    """

    code: str
    weekday_names: tuple[str, ...]
    weekday_abbreviations: tuple[str, ...]
    month_names: tuple[str, ...]
    month_names_genitive: tuple[str, ...]
    today: str
    yesterday: str
    has_entries: str
    weekend: str
    stats_entries: str
    stats_days: str
    stats_rate: str
    no_sources: str

    def __post_init__(self) -> None:
        if len(self.weekday_names) != 7 or len(self.weekday_abbreviations) != 7:
            raise ValueError(f"locale '{self.code}' must define 7 weekday names")
        if len(self.month_names) != 12 or len(self.month_names_genitive) != 12:
            raise ValueError(f"locale '{self.code}' must define 12 month names")

    def weekday(self, index: int) -> str:
        return self.weekday_names[index]

    def weekday_short(self, index: int) -> str:
        return self.weekday_abbreviations[index]

    def month(self, month: int) -> str:
        return self.month_names[month - 1]

    def month_genitive(self, month: int) -> str:
        return self.month_names_genitive[month - 1]


RU = CalendarLocale(
    code="ru",
    weekday_names=(
        "понедельник",
        "вторник",
        "среда",
        "четверг",
        "пятница",
        "суббота",
        "воскресенье",
    ),
    weekday_abbreviations=("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"),
    month_names=(
        "Январь",
        "Февраль",
        "Март",
        "Апрель",
        "Май",
        "Июнь",
        "Июль",
        "Август",
        "Сентябрь",
        "Октябрь",
        "Ноябрь",
        "Декабрь",
    ),
    month_names_genitive=(
        "января",
        "февраля",
        "марта",
        "апреля",
        "мая",
        "июня",
        "июля",
        "августа",
        "сентября",
        "октября",
        "ноября",
        "декабря",
    ),
    today="Сегодня",
    yesterday="Вчера",
    has_entries="Есть записи",
    weekend="Выходной",
    stats_entries="Записей",
    stats_days="Дней с записями",
    stats_rate="Заполненность",
    no_sources="Источники записей не настроены.",
)

EN = CalendarLocale(
    code="en",
    weekday_names=(
        "Monday",
        "Tuesday",
        "Wednesday",
        "Thursday",
        "Friday",
        "Saturday",
        "Sunday",
    ),
    weekday_abbreviations=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    month_names=(
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ),
    # English has no separate genitive form.
    month_names_genitive=(
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ),
    today="Today",
    yesterday="Yesterday",
    has_entries="Has entries",
    weekend="Weekend",
    stats_entries="Entries",
    stats_days="Days with entries",
    stats_rate="Completion",
    no_sources="No entry sources configured.",
)

DEFAULT_LOCALE = RU

_LOCALES = {locale.code: locale for locale in (RU, EN)}


def get_locale(code: str) -> CalendarLocale:
    normalized = code.strip().lower()
    try:
        return _LOCALES[normalized]
    except KeyError as exc:
        raise ValueError(f"Unsupported calendar locale: {code}") from exc


def available_locales() -> list[str]:
    return sorted(_LOCALES)
