"""
Aggregate statistics over the file registry.

Everything here is a pure function of its inputs: the monthly aggregation,
per-type totals, the top-contributor ranking and the exported report. The
only impure helper is ``cached_monthly_stats``, which memoizes the monthly
aggregation in Flask-Caching under a content hash of the input.
"""
import hashlib
from dataclasses import dataclass
from datetime import datetime

from teamfocuz.cache import cache
from teamfocuz.models import FileType, MonthlyStats, ReviewStatus, UserRole, utcnow

TOP_CONTRIBUTORS_LIMIT = 5


@dataclass(frozen=True)
class Contributor:
    name: str
    count: int

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class StatCard:
    title: str
    value: int | str
    icon: str
    color: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "value": self.value,
            "icon": self.icon,
            "color": self.color,
        }


def monthly_stats(files) -> list[MonthlyStats]:
    """Group files by calendar month and count each type.

    Returns one record per month present in the input, sorted ascending by
    ``YYYY-MM`` key (string order is chronological order).
    """
    buckets: dict[str, dict[str, int]] = {}
    for record in files:
        counts = buckets.setdefault(
            record.month_key, {"videos": 0, "scripts": 0, "voices": 0, "total": 0}
        )
        counts[record.type.plural_key] += 1
        counts["total"] += 1
    return [MonthlyStats(month=month, **buckets[month]) for month in sorted(buckets)]


def month_stats(files, month: str) -> MonthlyStats:
    """Statistics for a single ``YYYY-MM`` month (all zeros if absent)."""
    for stats in monthly_stats(files):
        if stats.month == month:
            return stats
    return MonthlyStats(month=month)


def totals_by_type(files) -> dict[str, int]:
    totals = {file_type.plural_key: 0 for file_type in FileType}
    for record in files:
        totals[record.type.plural_key] += 1
    return totals


def top_contributors(files, limit: int = TOP_CONTRIBUTORS_LIMIT) -> list[Contributor]:
    """Rank uploaders by number of files.

    Uploaders are grouped by id and named after their first file. Ties keep
    first-appearance order (``sorted`` is stable).
    """
    counts: dict[str, list] = {}
    for record in files:
        entry = counts.setdefault(record.uploaded_by, [record.uploaded_by_name, 0])
        entry[1] += 1
    ranked = sorted(counts.values(), key=lambda entry: entry[1], reverse=True)
    return [
        Contributor(name=name, count=count) for name, count in ranked[: max(0, limit)]
    ]


def files_fingerprint(files) -> str:
    """Content hash of the fields the monthly aggregation depends on."""
    digest = hashlib.sha256()
    for record in files:
        digest.update(
            f"{record.id}|{record.type.value}|{record.month_key}\n".encode("utf-8")
        )
    return digest.hexdigest()


def cached_monthly_stats(files) -> list[MonthlyStats]:
    """``monthly_stats`` memoized by content hash of ``files``."""
    files = list(files)
    key = f"monthly_stats:{files_fingerprint(files)}"
    cached = cache.get(key)
    if cached is not None:
        return cached
    result = monthly_stats(files)
    cache.set(key, result)
    return result


def build_report(
    files, users, now: datetime | None = None, limit: int = TOP_CONTRIBUTORS_LIMIT
) -> dict:
    """Assemble the downloadable JSON report."""
    files = list(files)
    generated = now or utcnow()
    return {
        "generated": generated.isoformat(),
        "totalFiles": len(files),
        "totalUsers": len(list(users)),
        "monthlyStats": [s.to_dict() for s in monthly_stats(files)],
        "totalByType": totals_by_type(files),
        "topContributors": [c.to_dict() for c in top_contributors(files, limit)],
    }


def report_filename(now: datetime | None = None) -> str:
    return f"teamfocuz-report-{(now or utcnow()).strftime('%Y-%m-%d')}.json"


def greeting(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    return "Good evening"


_CONTRIBUTOR_CARDS = {
    UserRole.VIDEO_EDITOR: (FileType.VIDEO, "Videos Uploaded", "video", "blue"),
    UserRole.SCRIPT_WRITER: (FileType.SCRIPT, "Scripts Uploaded", "file-text", "green"),
    UserRole.VOICE_ARTIST: (
        FileType.VOICE,
        "Voice Files Uploaded",
        "volume-2",
        "purple",
    ),
}


def dashboard_stats(user, files, users, now: datetime | None = None) -> list[StatCard]:
    """Role-specific stat cards for the dashboard.

    Admins see team-wide numbers; contributors see their own uploads.
    """
    files = list(files)
    if user.is_admin():
        current_month = (now or utcnow()).strftime("%Y-%m")
        return [
            StatCard("Total Users", len(list(users)), "users", "blue"),
            StatCard("Total Files", len(files), "file-text", "green"),
            StatCard(
                "Pending Reviews",
                sum(1 for f in files if f.status == ReviewStatus.PENDING),
                "clock",
                "yellow",
            ),
            StatCard(
                "Uploads This Month",
                month_stats(files, current_month).total,
                "trending-up",
                "purple",
            ),
        ]

    card = _CONTRIBUTOR_CARDS.get(user.role)
    if card is None:
        return []
    file_type, title, icon, color = card
    own = [f for f in files if f.uploaded_by == user.id]
    return [
        StatCard(title, sum(1 for f in own if f.type == file_type), icon, color),
        StatCard(
            "Pending Review",
            sum(1 for f in own if f.status == ReviewStatus.PENDING),
            "clock",
            "yellow",
        ),
    ]
