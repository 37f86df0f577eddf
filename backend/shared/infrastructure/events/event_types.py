"""
Event Type Constants.

Defines the event types published on Redis after table state moves.
"""

# =============================================================================
# Table move events
# =============================================================================

TABLE_MOVED = "TABLE_MOVED"                    # Silent refresh signal for captains
TABLE_MOVE_COMPLETED = "TABLE_MOVE_COMPLETED"  # Human-readable message for billers

# =============================================================================
# Size limits
# =============================================================================

MAX_EVENT_SIZE = 64 * 1024  # 64 KB
