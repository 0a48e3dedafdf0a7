"""
Task subsystem.

Components:
- task_models.py: data structures (TaskLine, ScanCursor, RankTier, RankedTask, ...)
- status_filter.py: status filter compiler + checkbox line grammar
- sources.py: document origins (streams, daily notes, folder)
- aggregator.py: union + dedupe + ordering of candidate documents
- scanner.py: cursor-based paginated scanning
- ranker.py: top task selection with tiers and recency tie-break
- task_view.py: caller-side controller (refresh / load more)
"""
