from feedback_portal.admin.monitor import ReviewMonitor
from feedback_portal.admin.stats import CompletionBadge, ReviewStats, completion_badge, compute_stats

__all__ = ["ReviewMonitor", "ReviewStats", "CompletionBadge", "compute_stats", "completion_badge"]
