"""Service for summarising recorded time."""

import logging
from datetime import datetime
from typing import List, Optional

import pandas as pd

from ..entities.activity import Activity
from ..interfaces.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

SEGMENT_COLUMNS = ["activity", "start_time", "end_time", "is_open", "seconds"]


class TimeReportService:
    """Builds per-activity and per-day totals from time segments."""

    def __init__(self, clock: Optional[Clock] = None):
        """Initialize report service.

        Args:
            clock: Source of the current time, used to close open segments
        """
        self.clock = clock or SystemClock()

    def segments_frame(
        self,
        activities: List[Activity],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> pd.DataFrame:
        """Tabulate segments, clipped to an optional time range.

        Args:
            activities: Activities to tabulate
            start: Drop time before this instant
            end: Drop time after this instant

        Returns:
            DataFrame: One row per segment overlapping the range
        """
        now = self.clock.now()
        rows = []
        for activity in activities:
            for segment in activity.time_segments:
                seg_start = segment.start_time
                seg_end = segment.effective_end(now)
                if start is not None:
                    seg_start = max(seg_start, start)
                if end is not None:
                    seg_end = min(seg_end, end)
                if seg_end < seg_start:
                    continue
                rows.append(
                    {
                        "activity": activity.name,
                        "start_time": seg_start,
                        "end_time": seg_end,
                        "is_open": segment.is_open,
                        "seconds": (seg_end - seg_start).total_seconds(),
                    }
                )

        return pd.DataFrame(rows, columns=SEGMENT_COLUMNS)

    def activity_totals(
        self,
        activities: List[Activity],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> pd.Series:
        """Total seconds per activity name, largest first."""
        df = self.segments_frame(activities, start, end)
        if df.empty:
            return pd.Series(dtype=float, name="seconds")

        totals = df.groupby("activity")["seconds"].sum().sort_values(ascending=False)
        logger.debug(f"Computed totals for {len(totals)} activities")
        return totals

    def daily_totals(
        self,
        activities: List[Activity],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> pd.DataFrame:
        """Total seconds per day (rows) and activity (columns).

        Segments are attributed to the day they start on.
        """
        df = self.segments_frame(activities, start, end)
        if df.empty:
            return pd.DataFrame()

        df["date"] = pd.to_datetime(df["start_time"]).dt.date
        return (
            df.pivot_table(
                index="date",
                columns="activity",
                values="seconds",
                aggfunc="sum",
                fill_value=0.0,
            )
            .sort_index()
        )
