"""
Activity metrics for reporting.

Counts meetings, meeting minutes, and issue updates for an activity set.
These numbers feed reports next to the score; they never change it.
"""

from collections.abc import Sequence

from focuslens.features.fragmentation.domain.models import ActivityItem, ActivityMetrics


def summarize_activity(activities: Sequence[ActivityItem]) -> ActivityMetrics:
    meeting_count = 0
    total_meeting_minutes = 0.0
    issue_update_count = 0
    completed_issue_count = 0
    presence_update_count = 0

    for activity in activities:
        if activity.is_meeting:
            meeting_count += 1
            # Missing durations add nothing
            total_meeting_minutes += activity.duration_minutes or 0.0
        elif activity.is_presence_update:
            presence_update_count += 1
        if activity.is_issue_update:
            issue_update_count += 1
            if activity.is_completed_issue:
                completed_issue_count += 1

    return ActivityMetrics(
        activities_count=len(activities),
        meeting_count=meeting_count,
        total_meeting_minutes=total_meeting_minutes,
        issue_update_count=issue_update_count,
        completed_issue_count=completed_issue_count,
        presence_update_count=presence_update_count,
        sources=sorted({activity.source for activity in activities}),
    )
