"""
Scheduler Job Definitions
"""
import logging

from plan91.services.routines.misses import check_missed_days as check_missed_days_service

logger = logging.getLogger(__name__)


def check_missed_days():
    """
    Record misses for the day that just ended
    Called once a day shortly after local midnight
    """
    try:
        result = check_missed_days_service()
        if result["failures"]:
            logger.warning(f"[SCHEDULER] Miss check finished with {result['failures']} failure(s)")
    except Exception as e:
        logger.error(f"[SCHEDULER] Error in check_missed_days: {e}", exc_info=True)
