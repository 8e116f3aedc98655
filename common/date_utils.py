from datetime import datetime
import pandas as pd
from common.typechecking import TypeCheckBase

SECONDS_PER_DAY = 24 * 60 * 60


class DateUtils(TypeCheckBase):
    @staticmethod
    def elapsed_days(start: datetime, end: datetime) -> float:
        # Fractional days, so intraday series keep their resolution.
        return (pd.Timestamp(end) - pd.Timestamp(start)).total_seconds() / SECONDS_PER_DAY

    @staticmethod
    def add_days(start: datetime, days: float) -> datetime:
        return pd.Timestamp(start) + pd.Timedelta(days=days)

    @staticmethod
    def format_date(moment: datetime) -> str:
        return pd.Timestamp(moment).strftime("%Y-%m-%d")
