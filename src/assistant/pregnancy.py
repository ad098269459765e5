"""Pregnancy progress arithmetic and the weekly baby-size table."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

PREGNANCY_WEEKS = 40
DAYS_PER_WEEK = 7
TOTAL_PREGNANCY_DAYS = PREGNANCY_WEEKS * DAYS_PER_WEEK

TRIMESTER_NAMES = {1: "孕早期", 2: "孕中期", 3: "孕晚期"}


@dataclass(frozen=True)
class BabySize:
    size: str
    weight: str
    comparison: str


BABY_SIZES: dict[int, BabySize] = {
    1: BabySize("0.1mm", "-", "一粒尘埃"),
    2: BabySize("0.2mm", "-", "一粒罂粟籽"),
    3: BabySize("0.3mm", "-", "一粒芝麻"),
    4: BabySize("1mm", "-", "一粒罂粟籽"),
    5: BabySize("2mm", "-", "一粒芝麻"),
    6: BabySize("6mm", "1g", "一颗扁豆"),
    7: BabySize("1cm", "1g", "一颗蓝莓"),
    8: BabySize("1.6cm", "1g", "一颗覆盆子"),
    9: BabySize("2.3cm", "2g", "一颗樱桃"),
    10: BabySize("3.1cm", "4g", "一颗草莓"),
    11: BabySize("4.1cm", "7g", "一颗无花果"),
    12: BabySize("5.4cm", "14g", "一颗青柠"),
    13: BabySize("7.4cm", "23g", "一个柠檬"),
    14: BabySize("8.7cm", "43g", "一个桃子"),
    15: BabySize("10.1cm", "70g", "一个苹果"),
    16: BabySize("11.6cm", "100g", "一个牛油果"),
    17: BabySize("13cm", "140g", "一个石榴"),
    18: BabySize("14.2cm", "190g", "一个甜椒"),
    19: BabySize("15.3cm", "240g", "一个芒果"),
    20: BabySize("16.4cm", "300g", "一根香蕉"),
    21: BabySize("26.7cm", "360g", "一根胡萝卜"),
    22: BabySize("27.8cm", "430g", "一个木瓜"),
    23: BabySize("28.9cm", "500g", "一个大芒果"),
    24: BabySize("30cm", "600g", "一根玉米棒"),
    25: BabySize("34.6cm", "660g", "一个大头菜"),
    26: BabySize("35.6cm", "760g", "一颗生菜"),
    27: BabySize("36.6cm", "875g", "一颗花椰菜"),
    28: BabySize("37.6cm", "1kg", "一颗茄子"),
    29: BabySize("38.6cm", "1.15kg", "一颗南瓜"),
    30: BabySize("39.9cm", "1.3kg", "一颗大白菜"),
    31: BabySize("41.1cm", "1.5kg", "一个椰子"),
    32: BabySize("42.4cm", "1.7kg", "一颗哈密瓜"),
    33: BabySize("43.7cm", "1.9kg", "一个菠萝"),
    34: BabySize("45cm", "2.1kg", "一个哈密瓜"),
    35: BabySize("46.2cm", "2.4kg", "一个蜜瓜"),
    36: BabySize("47.4cm", "2.6kg", "一颗罗马生菜"),
    37: BabySize("48.6cm", "2.9kg", "一颗瑞士甜菜"),
    38: BabySize("49.8cm", "3kg", "一颗韭葱"),
    39: BabySize("50.7cm", "3.3kg", "一个小西瓜"),
    40: BabySize("51.2cm", "3.5kg", "一个小南瓜"),
}


def get_trimester(week: int) -> int:
    if week <= 13:
        return 1
    if week <= 27:
        return 2
    return 3


def get_trimester_name(trimester: int) -> str:
    return TRIMESTER_NAMES.get(trimester, "")


def get_baby_size(week: int) -> BabySize:
    """Size comparison for ``week``, clamped to 1..40."""
    clamped = max(1, min(week, PREGNANCY_WEEKS))
    return BABY_SIZES.get(clamped, BABY_SIZES[20])


@dataclass
class PregnancyProgress:
    current_week: int
    current_day: int
    trimester: int
    total_days: int
    days_until_due: int
    progress_percent: float


def calculate_pregnancy_progress(due_date: date, today: Optional[date] = None) -> PregnancyProgress:
    """Week/day position counted back from the due date (40 weeks total)."""
    today = today or date.today()
    days_until_due = (due_date - today).days
    total_days = TOTAL_PREGNANCY_DAYS - days_until_due
    week = max(1, min(total_days // DAYS_PER_WEEK + 1, PREGNANCY_WEEKS))
    day = max(1, min(total_days % DAYS_PER_WEEK + 1, DAYS_PER_WEEK))
    percent = min(100.0, max(0.0, total_days / TOTAL_PREGNANCY_DAYS * 100))
    return PregnancyProgress(
        current_week=week,
        current_day=day,
        trimester=get_trimester(week),
        total_days=max(0, total_days),
        days_until_due=max(0, days_until_due),
        progress_percent=round(percent, 1),
    )


def due_date_from_last_period(last_period: date) -> date:
    return last_period + timedelta(days=TOTAL_PREGNANCY_DAYS)


@dataclass
class PregnancyContext:
    """Where the pregnancy is today, as interpolated into the system prompt."""

    current_week: int
    current_day: int
    trimester: int
    days_until_due: int
    warning_signs: list[str] = field(default_factory=list)

    @property
    def baby_size(self) -> BabySize:
        return get_baby_size(self.current_week)

    @classmethod
    def from_due_date(
        cls,
        due_date: date,
        today: Optional[date] = None,
        warning_signs: Optional[list[str]] = None,
    ) -> "PregnancyContext":
        progress = calculate_pregnancy_progress(due_date, today)
        return cls(
            current_week=progress.current_week,
            current_day=progress.current_day,
            trimester=progress.trimester,
            days_until_due=progress.days_until_due,
            warning_signs=list(warning_signs or []),
        )
