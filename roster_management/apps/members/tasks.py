"""
Celery tasks for the roster
"""
import logging

from celery import shared_task

from roster_management.apps.members.application.services import PromotionApplicationService

logger = logging.getLogger(__name__)


@shared_task(name='members.process_auto_promotions')
def process_auto_promotions_task():
    """
    Daily promotion sweep

    Applies board selections whose promotion date has arrived and the
    time-based promotions for E-1, E-2 and E-3 members.
    """
    service = PromotionApplicationService()

    try:
        result = service.process_auto_promotions()
    except Exception as e:
        logger.exception("Promotion sweep failed")
        return {
            'success': False,
            'error': str(e)
        }

    logger.info(
        "Promotion sweep for %s: %d promoted, %d failed",
        result.today, len(result.updated), len(result.failed),
    )
    return {
        'success': True,
        'promoted_count': len(result.updated),
        'members': [member.row_id for member in result.updated],
        'failed': list(result.failed),
    }
